"""
Habit registry.

Habit CRUD lives with an upstream collaborator; this module owns the
queries the score engine needs (active-habit counts) and the minimal writes
collaborators use to register and soft-delete habits.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select, insert, update, and_, func
from sqlalchemy.orm import Session

from habitscore.core.database import get_db_session, habits, storage_errors
from habitscore.core.errors import NotFoundError, ValidationError
from habitscore.core.logging import log_event
from habitscore.features.users.service import get_or_create_user
from habitscore.models.habit import Habit


def _row_to_habit(row) -> Habit:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Habit(
        habit_id=row.id,
        user_id=row.user_id,
        name=row.name,
        is_active=bool(row.is_active),
        created_at=created_at,
    )


def count_active_habits(session: Session, user_id: str) -> int:
    """Active (not soft-deleted) habits owned by user_id; 0 for unknown users."""
    return session.execute(
        select(func.count())
        .select_from(habits)
        .where(and_(habits.c.user_id == user_id, habits.c.is_active.is_(True)))
    ).scalar_one()


def get_active_habit(session: Session, user_id: str, habit_id: str) -> Optional[Habit]:
    row = session.execute(
        select(habits).where(
            and_(
                habits.c.id == habit_id,
                habits.c.user_id == user_id,
                habits.c.is_active.is_(True),
            )
        )
    ).first()
    return _row_to_habit(row) if row else None


def list_active_habits(user_id: str) -> List[Habit]:
    with storage_errors("Habit listing"):
        with get_db_session() as session:
            rows = session.execute(
                select(habits)
                .where(and_(habits.c.user_id == user_id, habits.c.is_active.is_(True)))
                .order_by(habits.c.created_at.asc(), habits.c.id.asc())
            ).all()
    return [_row_to_habit(row) for row in rows]


def register_habit(user_id: str, name: str, *, habit_id: Optional[str] = None, now: Optional[datetime] = None) -> Habit:
    if not name or not name.strip():
        raise ValidationError("Habit name is required")
    if len(name.strip()) > 100:
        raise ValidationError("Habit name must be between 1 and 100 characters")

    habit = Habit(
        habit_id=habit_id or str(uuid4()),
        user_id=user_id,
        name=name.strip(),
        is_active=True,
        created_at=now or datetime.now(timezone.utc),
    )
    get_or_create_user(user_id)
    with get_db_session() as session:
        session.execute(
            insert(habits).values(
                id=habit.habit_id,
                user_id=habit.user_id,
                name=habit.name,
                is_active=True,
                created_at=habit.created_at,
            )
        )
    log_event("info", "habit.registered", user_id=user_id, event_type="habit.registered", extra={"habit_id": habit.habit_id})
    return habit


def deactivate_habit(user_id: str, habit_id: str) -> None:
    """Soft delete. Historical daily scores are left as they were."""
    with get_db_session() as session:
        result = session.execute(
            update(habits)
            .where(and_(habits.c.id == habit_id, habits.c.user_id == user_id, habits.c.is_active.is_(True)))
            .values(is_active=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Habit not found")
    log_event("info", "habit.deactivated", user_id=user_id, event_type="habit.deactivated", extra={"habit_id": habit_id})
