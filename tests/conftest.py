"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database. StaticPool keeps a
single connection, so every session sees the same tables.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from budget_tracker.api import create_app
from budget_tracker.config import AppSettings, DatabaseSettings, SessionSettings, Settings
from budget_tracker.orchestrator import create_app_components
from budget_tracker.services.storage import DatabaseClient


class FakeClock:
    """Manually advanced replacement for utcnow."""

    def __init__(self, now: datetime = datetime(2025, 3, 1, 12, 0, 0)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        database=DatabaseSettings(url="sqlite://"),
        session=SessionSettings(cookie_name="app_session", max_age_days=30),
        app=AppSettings(app_environment="development", log_level="WARNING"),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def components(settings, engine, clock):
    database = DatabaseClient(settings.database, engine=engine)
    return create_app_components(settings=settings, database=database, clock=clock)


@pytest.fixture
def store(components):
    return components.store


@pytest.fixture
def app(components):
    app = create_app(components)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(store):
    """Insert a user directly, skipping password hashing."""
    counter = {"n": 0}

    def _make_user(email=None):
        counter["n"] += 1
        return store.create_user(
            email=email or f"user{counter['n']}@example.com",
            password_hash="salt:hash",
            display_name=None,
        )

    return _make_user

