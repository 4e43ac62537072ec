"""Blocking persistence layer for tasks.

TaskStore wraps the crud functions with a session per call, converts ORM rows
into immutable snapshots and keeps the active/trashed live queries current.
None of its methods may run on the caller's thread; TaskService dispatches them
to its background worker.
"""
from todo_app import crud, schemas
from todo_app.database import SessionLocal
from todo_app.exceptions import TaskNotFound, TaskStoreError
from todo_app.live import LiveQuery
from todo_app.logger import logger


class TaskStore:
    def __init__(self, session_factory=None):
        self._session_factory = session_factory or SessionLocal
        self._active = LiveQuery("active", crud.get_active_tasks, self._session_factory)
        self._trashed = LiveQuery("trashed", crud.get_trashed_tasks, self._session_factory)
        self._stale = False

    def list_active(self) -> LiveQuery:
        """Live view of tasks without a deletion date"""
        return self._active

    def list_trashed(self) -> LiveQuery:
        """Live view of tasks with a deletion date"""
        return self._trashed

    def list_trashed_snapshot(self) -> list[schemas.Task]:
        """One-shot read of the trash, independent of the live query"""
        db = self._session_factory()
        try:
            return [schemas.Task.model_validate(t) for t in crud.get_trashed_tasks(db)]
        finally:
            db.close()

    def count(self) -> int:
        db = self._session_factory()
        try:
            return crud.get_tasks_count(db)
        finally:
            db.close()

    def get(self, task_id: int) -> schemas.Task:
        db = self._session_factory()
        try:
            db_task = crud.get_task(db, task_id)
            if db_task is None:
                raise TaskNotFound(task_id)
            return schemas.Task.model_validate(db_task)
        finally:
            db.close()

    def insert(self, task: schemas.TaskCreate) -> schemas.Task:
        db = self._session_factory()
        try:
            created = schemas.Task.model_validate(crud.create_task(db, task))
        finally:
            db.close()
        self.refresh_after_commit()
        return created

    def update(self, task: schemas.Task) -> schemas.Task:
        db = self._session_factory()
        try:
            updated = schemas.Task.model_validate(crud.update_task(db, task))
        finally:
            db.close()
        self.refresh_after_commit()
        return updated

    def delete(self, task: schemas.Task, refresh: bool = True) -> bool:
        """Remove the row for task.id; False if it was already gone

        With refresh=False the live queries are left alone so a batch of
        deletes can be followed by a single refresh_after_commit().
        """
        db = self._session_factory()
        try:
            deleted = crud.delete_task(db, task.id)
        finally:
            db.close()
        if deleted is None:
            logger.debug(f"Task {task.id} already deleted")
            return False
        if refresh:
            self.refresh_after_commit()
        return True

    def refresh(self) -> None:
        """Recompute both live queries and notify their subscribers"""
        self._active.refresh()
        self._trashed.refresh()
        self._stale = False

    @property
    def stale(self) -> bool:
        """True while the live queries lag behind a committed write"""
        return self._stale

    def refresh_after_commit(self) -> None:
        """Refresh following a committed write.

        The write is durable whatever happens here, so a failed refresh is
        logged and the views are marked stale instead of failing the write.
        The next successful refresh catches them up.
        """
        try:
            self.refresh()
        except TaskStoreError as e:
            self._stale = True
            logger.error(f"Live queries not refreshed after commit: {str(e)}")
