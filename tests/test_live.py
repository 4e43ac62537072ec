import threading

from todo_app import crud
from todo_app.database import SessionLocal
from todo_app.live import LiveQuery
from factories import make_task, make_trashed_task


def make_query():
    return LiveQuery("active", crud.get_active_tasks, SessionLocal)


def test_snapshot_empty_before_first_refresh():
    query = make_query()
    assert query.loaded is False
    assert query.snapshot == []


def test_subscribe_before_load_gets_nothing_until_refresh(db_session):
    query = make_query()
    received = []
    query.subscribe(received.append)
    assert received == []

    crud.create_task(db_session, make_task())
    query.refresh()

    assert len(received) == 1
    assert [t.description for t in received[0]] == ["Buy milk"]


def test_subscribe_after_load_gets_current_snapshot(db_session):
    crud.create_task(db_session, make_task())
    query = make_query()
    query.refresh()

    received = []
    query.subscribe(received.append)

    assert len(received) == 1
    assert received[0][0].description == "Buy milk"


def test_refresh_applies_predicate(db_session):
    crud.create_task(db_session, make_task(description="keep"))
    crud.create_task(db_session, make_trashed_task(description="gone"))
    query = make_query()

    tasks = query.refresh()

    assert [t.description for t in tasks] == ["keep"]
    assert query.snapshot == tasks


def test_unsubscribe_stops_delivery(db_session):
    query = make_query()
    received = []
    subscription = query.subscribe(received.append)
    assert query.subscriber_count == 1

    subscription.cancel()
    subscription.cancel()
    query.refresh()

    assert received == []
    assert query.subscriber_count == 0


def test_failing_subscriber_does_not_block_others():
    query = make_query()
    received = []

    def broken(tasks):
        raise RuntimeError("observer crashed")

    query.subscribe(broken)
    query.subscribe(received.append)
    query.refresh()

    assert received == [[]]


def test_snapshot_is_a_copy():
    query = make_query()
    query.refresh()
    query.snapshot.append("junk")
    assert query.snapshot == []


def test_subscribe_delivery_is_not_overtaken_by_refresh(store):
    query = store.list_active()
    query.refresh()
    entered = threading.Event()
    release = threading.Event()
    received = []

    def slow_subscriber(tasks):
        if not entered.is_set():
            entered.set()
            release.wait(5)
        received.append(tasks)

    subscriber = threading.Thread(target=query.subscribe, args=(slow_subscriber,))
    subscriber.start()
    assert entered.wait(5)

    writer = threading.Thread(target=store.insert, args=(make_task(),))
    writer.start()
    writer.join(0.2)

    release.set()
    subscriber.join(5)
    writer.join(5)

    assert [len(tasks) for tasks in received] == [0, 1]
    assert received[-1] == query.snapshot
