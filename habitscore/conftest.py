# habitscore/conftest.py
import os
from datetime import datetime, timezone

# Point the engine at an in-memory SQLite database before settings load
os.environ.setdefault("ENV", "test")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")

import pytest

from habitscore.features.scores.dates import FixedClock


@pytest.fixture(scope="session")
def db_url():
    """Database URL the suite runs against (in-memory SQLite unless overridden)."""
    return os.getenv("TEST_DATABASE_URL")


@pytest.fixture(scope="function", autouse=True)
def reset_db(db_url):
    """
    Fresh schema for every test.

    Drops and recreates all tables so no rows leak between tests.
    """
    from habitscore.core.database import init_engine, reset_database, dispose_engine

    init_engine(db_url)
    reset_database()
    yield
    dispose_engine()


@pytest.fixture
def fixed_now():
    """Fixed timestamp for deterministic testing."""
    return datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return FixedClock(fixed_now)


class Seeder:
    """Writes users, habits and raw completion rows for tests."""

    def user(self, user_id, display_name=None):
        from habitscore.features.users.service import get_or_create_user

        return get_or_create_user(user_id, display_name)

    def habits(self, user_id, *names, now=None):
        from habitscore.features.habits.registry import register_habit

        self.user(user_id)
        created = now or datetime(2025, 1, 1, tzinfo=timezone.utc)
        return [
            register_habit(user_id, name, habit_id=f"{user_id}-{name}", now=created).habit_id
            for name in names
        ]

    def complete(self, user_id, habit_id, day, completed=True, notes=None):
        from sqlalchemy import insert

        from habitscore.core.database import get_db_session, habit_completions

        with get_db_session() as session:
            session.execute(
                insert(habit_completions).values(
                    user_id=user_id,
                    habit_id=habit_id,
                    date=day,
                    completed=completed,
                    notes=notes,
                    created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
                )
            )


@pytest.fixture
def seed():
    return Seeder()
