"""
Caller identity for the habitscore API.

Authentication happens upstream; the gateway forwards the authenticated
user in the X-User-Id header. Every identified caller is registered in the
user directory so they appear on the leaderboard.
"""
from fastapi import Header, HTTPException
from typing import Optional
import logging

logger = logging.getLogger("habitscore")


def get_current_user_id(
    x_user_id: Optional[str] = Header(None, description="Authenticated user ID forwarded by the gateway"),
) -> str:
    """
    Extract current user ID from the X-User-Id header.

    Raises:
        HTTPException 401: Missing identity header
    """
    if x_user_id and x_user_id.strip():
        from habitscore.features.users.service import get_or_create_user

        user_id = x_user_id.strip()
        get_or_create_user(user_id)
        return user_id

    raise HTTPException(
        status_code=401,
        detail="Missing X-User-Id header",
    )
