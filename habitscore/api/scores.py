"""
habitscore/api/scores.py

Daily score endpoints: range reads, rolling stats and backfill.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from habitscore.core.auth import get_current_user_id
from habitscore.features.scores.service import fetch_scores, get_score_stats, recalculate_range

router = APIRouter()


class RecalculateRequest(BaseModel):
    startDate: Optional[str] = Field(default=None, description="First day, ISO 8601")
    endDate: Optional[str] = Field(default=None, description="Last day (inclusive), ISO 8601")


@router.get("/v1/scores/range", response_model=Dict[str, Any])
def get_scores_range(
    startDate: Optional[str] = Query(None, description="First day, ISO 8601"),
    endDate: Optional[str] = Query(None, description="Last day (inclusive), ISO 8601"),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Daily scores for the caller in [startDate, endDate], ascending by date."""
    scores = fetch_scores(user_id, startDate, endDate)
    return {
        "success": True,
        "data": [score.model_dump(mode="json") for score in scores],
    }


@router.get("/v1/scores/stats", response_model=Dict[str, Any])
def get_scores_stats(
    startDate: Optional[str] = Query(None, description="First day, ISO 8601"),
    endDate: Optional[str] = Query(None, description="Last day (inclusive), ISO 8601"),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """
    Rolling statistics for the caller.

    Returns total/average score, average percentage, best day and the
    current/longest run of 100% days. An empty range returns zeros.
    """
    stats = get_score_stats(user_id, startDate, endDate)
    return {"success": True, "data": stats.model_dump(mode="json")}


@router.post("/v1/scores/recalculate", response_model=Dict[str, Any])
def post_scores_recalculate(
    body: RecalculateRequest,
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Backfill: recompute one score per day in the range, ascending."""
    scores = recalculate_range(user_id, body.startDate, body.endDate)
    return {
        "success": True,
        "message": "Scores recalculated successfully",
        "data": [score.model_dump(mode="json") for score in scores],
    }
