"""
habitscore/api/leaderboard.py

Monthly leaderboard.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from habitscore.core.auth import get_current_user_id
from habitscore.features.leaderboard.service import get_leaderboard

router = APIRouter()


@router.get("/v1/leaderboard", response_model=Dict[str, Any])
def get_monthly_leaderboard(
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """
    Every user ranked by summed score for the current calendar month.

    Stable sort: score desc, user_id asc (deterministic tie-breaker).
    """
    leaderboard = get_leaderboard()
    return {"success": True, "data": leaderboard.model_dump(mode="json")}
