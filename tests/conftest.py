"""Pytest configuration and shared fixtures for LifeTrack tests.

This module provides database fixtures, habit/log factories and an app
client wired to a throwaway data directory, so tests never touch the real
application database.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from lifetrack.models import FrequencyType, Habit, HabitLog, HabitType, UserProfile
from lifetrack.infra.database import create_session_factory
from lifetrack.services.profiles import ensure_local_profile

# Friday; every test that needs a reference day uses this one.
TODAY = date(2024, 3, 15)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in the app."""

    return create_session_factory(db_engine)


@pytest.fixture
def profile(session_factory) -> UserProfile:
    """Default profile owning test habits."""

    return ensure_local_profile(session_factory, "tester")


@pytest.fixture
def other_profile(session_factory) -> UserProfile:
    """A second profile for ownership checks."""

    return ensure_local_profile(session_factory, "someone-else")


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(session_factory, profile):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        frequency_type: FrequencyType = FrequencyType.DAILY,
        frequency_value: int | None = None,
        frequency_days: str | None = None,
        habit_type: HabitType = HabitType.GOOD,
        is_archived: bool = False,
        owner: UserProfile | None = None,
    ) -> Habit:
        owner = owner or profile
        habit = Habit(
            user_id=owner.id,
            name=name,
            habit_type=habit_type,
            frequency_type=frequency_type,
            frequency_value=frequency_value,
            frequency_days=frequency_days,
            is_archived=is_archived,
        )
        with session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        return habit

    return _create_habit


@pytest.fixture
def log_factory(session_factory):
    """Factory for marking a habit complete on given days."""

    def _create_logs(habit: Habit, *days: date) -> list[HabitLog]:
        logs = [HabitLog(habit_id=habit.id, occurred_on=day) for day in days]
        with session_factory() as session:
            session.add_all(logs)
            session.commit()
            for log in logs:
                session.refresh(log)
            session.expunge_all()
        return logs

    return _create_logs


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Flask app using a temporary data directory and a fixed today."""

    monkeypatch.setenv("LIFETRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LIFETRACK_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("LIFETRACK_DEV_MODE", "true")

    from lifetrack import create_app

    app = create_app("testing")
    app.config["LIFETRACK_TODAY_PROVIDER"] = lambda: TODAY
    yield app

    from lifetrack.extensions import get_engine

    with app.app_context():
        get_engine().dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def json_headers():
    return {"Accept": "application/json"}
