"""
habitscore/api/users.py

Buddy views: the user list, another user's month-to-date stats and their
habit calendar for any month.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from habitscore.core.auth import get_current_user_id
from habitscore.features.users.overview import get_month_calendar, get_month_overview
from habitscore.features.users.service import list_buddies

router = APIRouter()


@router.get("/v1/users/buddies", response_model=Dict[str, Any])
def get_buddies(user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """Everyone except the caller, ordered by display name."""
    buddies = list_buddies(user_id)
    return {"success": True, "data": [u.model_dump(mode="json") for u in buddies]}


@router.get("/v1/users/{target_user_id}/stats", response_model=Dict[str, Any])
def get_user_month_stats(
    target_user_id: str,
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Month-to-date stats for any known user, with their habits and completed records."""
    overview = get_month_overview(target_user_id)
    return {"success": True, "data": overview.model_dump(mode="json")}


@router.get("/v1/users/{target_user_id}/calendar/{year}/{month}", response_model=Dict[str, Any])
def get_user_calendar(
    target_user_id: str,
    year: int,
    month: int,
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    calendar = get_month_calendar(target_user_id, year, month)
    return {"success": True, "data": calendar.model_dump(mode="json")}
