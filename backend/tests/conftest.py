import os
import tempfile

# Keep the app's default SQLite file out of the working tree
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.gettempdir(), "sdr_dashboard_test.db"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401  registers the tables
from app import app
from db import get_session
from notifications import CollectingNotifier
from store import RecordStore


@pytest.fixture(scope="function")
def test_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def test_session(test_engine):
    """Create a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(scope="function")
def store(test_session):
    return RecordStore(test_session)


@pytest.fixture(scope="function")
def notifier():
    return CollectingNotifier()


@pytest.fixture(scope="function")
def client(test_session):
    """Create a test client with dependency override."""

    def get_test_session():
        yield test_session

    app.dependency_overrides[get_session] = get_test_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
