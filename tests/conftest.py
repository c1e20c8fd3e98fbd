"""Test configuration and fixtures."""

from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from record_lifecycle.api import app
from record_lifecycle.db.base import Base, get_db
from record_lifecycle.db.store import RecordStore
from record_lifecycle.i18n import Translator
from record_lifecycle.lifecycle.actor import ActorContext

# In-memory SQLite shared across connections through StaticPool
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db() -> Generator[Session, None, None]:
    """Override the get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Fresh tables for every test."""
    from record_lifecycle.db import models  # noqa: F401

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db: Session) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def translator() -> Translator:
    return Translator("en")


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def user() -> ActorContext:
    return ActorContext(user_id="7", username="alice", roles=frozenset({"editor"}))


@pytest.fixture
def superadmin() -> ActorContext:
    return ActorContext(user_id="1", username="root", roles=frozenset({"superadmin"}))


def actor_headers(username: str = "alice", roles: str = "editor") -> Dict[str, str]:
    return {"X-Actor-Id": "7", "X-Actor-Username": username, "X-Actor-Roles": roles}


USER_HEADERS = actor_headers()
SUPERADMIN_HEADERS = actor_headers(username="root", roles="superadmin,editor")
