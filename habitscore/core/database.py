"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (StaticPool for SQLite)
- Test database support
- Table definitions for users, habits, completions and daily scores
"""
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, MetaData, Table, Column, Integer, String, Date, DateTime, Boolean, Float, Text, Index, UniqueConstraint, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func
import logging
import os

from habitscore.core.config import settings
from habitscore.core.errors import StorageError

logger = logging.getLogger("habitscore")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if url.startswith("sqlite"):
        # Test/dev only: one shared connection keeps in-memory databases alive
        # across sessions, but concurrent sessions share its transaction.
        # validate_env rejects sqlite in production.
        _engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,  # Set to True for SQL query logging
        )

    # Create session factory
    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def dispose_engine() -> None:
    """Drop the current engine so the next call re-reads the database URL."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)

    Commits on clean exit, rolls back on any exception.
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def storage_errors(action: str):
    """Re-raise SQLAlchemy failures inside the block as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"{action} failed: {exc.__class__.__name__}")
        raise StorageError(f"{action} failed") from exc


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def reset_database():
    """
    Reset the database by dropping and recreating all tables.

    WARNING: This is destructive! Only use in tests.
    """
    drop_all_tables()
    create_all_tables()


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(select(1))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


# Users table: the leaderboard population
users = Table(
    'app_users',
    metadata,
    Column('user_id', String(100), primary_key=True),
    Column('display_name', Text, nullable=True),
    Column('status', String(50), nullable=False, server_default='active'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_users_created_at', 'created_at'),
)

# Habit registry (soft delete via is_active)
habits = Table(
    'habits',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('name', String(100), nullable=False),
    Column('is_active', Boolean, nullable=False, server_default='1'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Composite index for count_active_habits: (user_id, is_active)
    Index('idx_habits_user_active', 'user_id', 'is_active'),
)

# Completion store: one row per (user, habit, calendar day)
habit_completions = Table(
    'habit_completions',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('habit_id', String(100), nullable=False, index=True),
    Column('date', Date, nullable=False),
    Column('completed', Boolean, nullable=False, server_default='1'),
    Column('notes', String(200), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    UniqueConstraint('user_id', 'habit_id', 'date', name='uq_habit_completions_user_habit_date'),
    # Composite index for count_completed pattern: (user_id, date)
    Index('idx_habit_completions_user_date', 'user_id', 'date'),
)

# Score store: one row per (user, calendar day), written only by the calculator
daily_scores = Table(
    'daily_scores',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('date', Date, nullable=False),
    Column('total_habits', Integer, nullable=False, server_default='0'),
    Column('completed_habits', Integer, nullable=False, server_default='0'),
    Column('score', Integer, nullable=False, server_default='0'),
    Column('percentage', Float, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    UniqueConstraint('user_id', 'date', name='uq_daily_scores_user_date'),
    # Composite index for range fetches and the monthly leaderboard sum
    Index('idx_daily_scores_user_date', 'user_id', 'date'),
    Index('idx_daily_scores_date', 'date'),
)
