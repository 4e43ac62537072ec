"""Live, subscribable views over the tasks table.

A LiveQuery holds the latest result of a loader function and pushes a fresh
list to every subscriber whenever it is refreshed. The store refreshes its
queries after each committed mutation, so subscribers never need to poll.
"""
import threading
from typing import Callable, Optional

from sqlalchemy.orm import Session

from todo_app import schemas
from todo_app.logger import logger

Loader = Callable[[Session], list]
Subscriber = Callable[[list[schemas.Task]], None]


class Subscription:
    """Handle returned by LiveQuery.subscribe"""

    def __init__(self, query: "LiveQuery", callback: Subscriber):
        self.query = query
        self.callback = callback

    def cancel(self) -> None:
        self.query.unsubscribe(self.callback)


class LiveQuery:
    def __init__(self, name: str, loader: Loader, session_factory):
        self.name = name
        self._loader = loader
        self._session_factory = session_factory
        self._lock = threading.Lock()
        # Held while a snapshot is handed out so deliveries never overtake each other
        self._delivery_lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._snapshot: Optional[list[schemas.Task]] = None

    @property
    def snapshot(self) -> list[schemas.Task]:
        """Most recent result; empty until the first refresh"""
        with self._lock:
            return list(self._snapshot or [])

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    def subscribe(self, callback: Subscriber) -> Subscription:
        """Register callback and hand it the current result if one is loaded"""
        with self._delivery_lock:
            with self._lock:
                self._subscribers.append(callback)
                current = None if self._snapshot is None else list(self._snapshot)
            if current is not None:
                self._deliver(callback, current)
        return Subscription(self, callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def refresh(self) -> list[schemas.Task]:
        """Re-run the loader and push the result to every subscriber.

        Blocking: must be called from the background worker.
        """
        db = self._session_factory()
        try:
            rows = self._loader(db)
            tasks = [schemas.Task.model_validate(row) for row in rows]
        finally:
            db.close()

        with self._delivery_lock:
            with self._lock:
                self._snapshot = tasks
                subscribers = list(self._subscribers)

            logger.debug(f"Live query '{self.name}' refreshed: {len(tasks)} tasks")
            for callback in subscribers:
                self._deliver(callback, list(tasks))
        return tasks

    def _deliver(self, callback: Subscriber, tasks: list[schemas.Task]) -> None:
        # One broken observer must not starve the others
        try:
            callback(tasks)
        except Exception:
            logger.exception(f"Subscriber of live query '{self.name}' failed")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
