"""Task lifecycle: create, edit, trash, restore and empty the trash.

Every command is queued on a single background worker and returns a
``concurrent.futures.Future``. The worker runs jobs in submission order, so a
caller that issues several commands sees them commit in that order.
"""
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from todo_app import schemas
from todo_app.config import get_settings
from todo_app.exceptions import EmptyTrashError, TaskStoreError
from todo_app.live import LiveQuery
from todo_app.logger import logger
from todo_app.store import TaskStore


def utcnow() -> datetime:
    # SQLite DateTime columns hold naive values
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskService:
    def __init__(
        self,
        store: TaskStore,
        clock: Optional[Callable[[], datetime]] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.store = store
        self.clock = clock or utcnow
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=get_settings().store_thread_name
        )
        self._submit("load", self.store.refresh)

    @property
    def active_tasks(self) -> LiveQuery:
        return self.store.list_active()

    @property
    def trashed_tasks(self) -> LiveQuery:
        return self.store.list_trashed()

    def create_task(self, description: str) -> "Future[schemas.Task]":
        task = schemas.TaskCreate(
            description=description,
            creation_date=self.clock(),
            deletion_date=None,
        )
        return self._submit("create_task", self.store.insert, task)

    def edit_task(self, task: schemas.Task, new_description: str) -> "Future[schemas.Task]":
        """Replace the description; a trashed task stays trashed"""
        edited = task.model_copy(update={"description": new_description})
        return self._submit("edit_task", self.store.update, edited)

    def move_to_trash(self, task: schemas.Task) -> "Future[schemas.Task]":
        """Stamp the task with the current time; re-trashing moves the stamp"""
        trashed = task.model_copy(update={"deletion_date": self.clock()})
        return self._submit("move_to_trash", self.store.update, trashed)

    def restore(self, task: schemas.Task) -> "Future[schemas.Task]":
        restored = task.model_copy(update={"deletion_date": None})
        return self._submit("restore", self.store.update, restored)

    def empty_trash(self) -> "Future[schemas.EmptyTrashResult]":
        return self._submit("empty_trash", self._empty_trash)

    def get_task(self, task_id: int) -> "Future[schemas.Task]":
        return self._submit("get_task", self.store.get, task_id)

    def close(self, wait: bool = True) -> None:
        """Stop accepting work; queued and running jobs are allowed to finish"""
        self._executor.shutdown(wait=wait)

    def _empty_trash(self) -> schemas.EmptyTrashResult:
        # Tasks trashed after this snapshot are left for the next call
        trashed = self.store.list_trashed_snapshot()
        deleted: list[int] = []
        failed: list[int] = []
        for task in trashed:
            try:
                self.store.delete(task, refresh=False)
            except TaskStoreError as e:
                logger.error(f"Could not delete task {task.id} while emptying trash: {str(e)}")
                failed.append(task.id)
                continue
            deleted.append(task.id)

        # One refresh for the whole batch
        if deleted:
            self.store.refresh_after_commit()

        if failed:
            raise EmptyTrashError(deleted=deleted, failed=failed)
        logger.info(f"Emptied trash: {len(deleted)} tasks deleted")
        return schemas.EmptyTrashResult(deleted=deleted, failed=[])

    def _submit(self, name: str, fn, *args) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: _log_failure(name, f))
        return future


def _log_failure(name: str, future: Future) -> None:
    if future.cancelled():
        logger.warning(f"Task operation '{name}' was cancelled")
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Task operation '{name}' failed: {exc}")
