"""
Sample data factory helpers for todo service tests.

These create schema objects with sensible defaults.
Override any field via keyword arguments.
"""

from datetime import datetime

from todo_app.schemas import TaskCreate


def make_task(**overrides):
    """Create a TaskCreate with sensible defaults."""
    defaults = {
        "description": "Buy milk",
        "creation_date": datetime(2024, 6, 15, 9, 0),
        "deletion_date": None,
    }
    defaults.update(overrides)
    return TaskCreate(**defaults)


def make_trashed_task(**overrides):
    """Create a TaskCreate that is already in the trash."""
    overrides.setdefault("deletion_date", datetime(2024, 6, 16, 18, 0))
    return make_task(**overrides)
