"""
User directory.
- get_or_create_user(user_id)
- get_user(user_id)
- list_users()
- list_buddies(user_id)
- normalize_display_name()
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select, insert
from sqlalchemy.exc import IntegrityError

from habitscore.core.database import get_db_session, users as app_users, storage_errors
from habitscore.models.user import User


def normalize_display_name(user_id: str, display_name: Optional[str]) -> str:
    return User.normalized_display_name(user_id, display_name)


def _row_to_user(row) -> User:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return User(
        user_id=row.user_id,
        created_at=created_at,
        display_name=row.display_name or normalize_display_name(row.user_id, None),
        status=row.status,
    )


def get_user(user_id: str) -> Optional[User]:
    with storage_errors("User lookup"):
        with get_db_session() as session:
            row = session.execute(select(app_users).where(app_users.c.user_id == user_id)).first()
    return _row_to_user(row) if row else None


def list_users() -> List[User]:
    with storage_errors("User listing"):
        with get_db_session() as session:
            rows = session.execute(select(app_users).order_by(app_users.c.user_id.asc())).all()
    return [_row_to_user(row) for row in rows]


def get_or_create_user(user_id: str, display_name: Optional[str] = None) -> User:
    existing = get_user(user_id)
    if existing:
        return existing

    now = datetime.now(timezone.utc)
    display = normalize_display_name(user_id, display_name)
    try:
        with get_db_session() as session:
            session.execute(
                insert(app_users).values(
                    user_id=user_id,
                    display_name=display,
                    status="active",
                    created_at=now,
                )
            )
    except IntegrityError:
        # Created concurrently by another request
        existing = get_user(user_id)
        if existing:
            return existing
        raise

    return User(user_id=user_id, created_at=now, display_name=display, status="active")


def list_buddies(user_id: str) -> List[User]:
    """Every other user, ordered by display name (case-insensitive), then user_id."""
    others = [user for user in list_users() if user.user_id != user_id]
    return sorted(others, key=lambda u: ((u.display_name or "").casefold(), u.user_id))
