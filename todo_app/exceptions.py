class TaskStoreError(Exception):
    """Base class for task persistence errors"""


class StorageFailure(TaskStoreError):
    """The database is unavailable or a write did not commit"""


class TaskNotFound(TaskStoreError):
    """No row exists for the given task id"""

    def __init__(self, task_id: int):
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class EmptyTrashError(TaskStoreError):
    """Some deletes of an empty-trash batch failed

    Rows listed in ``deleted`` are gone for good; rows in ``failed`` are
    still in the trash.
    """

    def __init__(self, deleted: list[int], failed: list[int]):
        super().__init__(
            f"Empty trash partially failed: {len(deleted)} deleted, "
            f"{len(failed)} failed ({failed})"
        )
        self.deleted = deleted
        self.failed = failed
