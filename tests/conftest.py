"""
Pytest configuration for the todo service tests.

IMPORTANT: DATABASE_URL must be set before any todo_app imports because
todo_app/database.py builds its engine at module level.
"""

import os
from datetime import datetime, timedelta

# --- Environment setup (before ANY todo_app imports) ---
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./tasks_test.db"

import pytest

from fastapi.testclient import TestClient

from todo_app.database import Base, SessionLocal, engine
from todo_app.main import app
from todo_app.service import TaskService
from todo_app.store import TaskStore


class FakeClock:
    """Deterministic clock that advances one minute per reading."""

    def __init__(self, start=datetime(2024, 6, 15, 9, 30)):
        self.now = start
        self.readings = []

    def __call__(self):
        value = self.now
        self.readings.append(value)
        self.now = self.now + timedelta(minutes=1)
        return value


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a fresh SQLAlchemy session for CRUD tests."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store():
    return TaskStore(SessionLocal)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, clock):
    svc = TaskService(store, clock=clock)
    yield svc
    svc.close()


@pytest.fixture
def client():
    """FastAPI TestClient; the lifespan builds its own store and service."""
    with TestClient(app) as c:
        yield c
