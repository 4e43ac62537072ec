from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class TaskCreate(BaseModel):
    """Schema for a task that has not been assigned an id yet"""
    description: str = Field(default="", description="Task description")
    creation_date: datetime
    deletion_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Schema for creating or editing a task over HTTP"""
    description: str = Field(default="", description="Task description")


class Task(BaseModel):
    """Immutable snapshot of a stored task"""
    id: int
    description: str
    creation_date: datetime
    deletion_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def is_trashed(self) -> bool:
        return self.deletion_date is not None


class EmptyTrashResult(BaseModel):
    """Outcome of a bulk purge of the trash"""
    deleted: list[int] = []
    failed: list[int] = []
