"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database (StaticPool keeps the
single connection alive), a fake clock and a private owner lock registry.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta

import pytest

from routetrack.Core.timeutils import from_epoch_ms
from routetrack.DB.base import Base
from routetrack.DB.session import build_engine, build_session_factory
from routetrack.Repositories.user import create_user
from routetrack.Schemas.user import User_create
from routetrack.Services.owner_locks import OwnerLockRegistry
from routetrack.Services.tracking_engine import build_tracking_engine

USER_ID = "test-user-id"
OTHER_USER_ID = "other-user-id"


class FakeClock:
    """Callable clock returning a fixed, manually advanced UTC time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_epoch_ms(self, value: int):
        self.now = from_epoch_ms(value)

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    create_user(db, User_create(id=USER_ID, email="test@example.com", name="Test User"))
    create_user(db, User_create(id=OTHER_USER_ID, name="Other User"))
    return USER_ID, OTHER_USER_ID


@pytest.fixture
def clock():
    return FakeClock(from_epoch_ms(5000))


@pytest.fixture
def locks():
    return OwnerLockRegistry()


@pytest.fixture
def engine(db, users, clock, locks):
    return build_tracking_engine(db, clock=clock, locks=locks)


def report(latitude, longitude, timestamp, **extra):
    """Request-body shaped report (epoch-ms timestamp)."""
    body = {"latitude": latitude, "longitude": longitude, "timestamp": timestamp}
    body.update(extra)
    return body
