from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from habitscore.core.auth import get_current_user_id
from habitscore.features.habits.completions import fetch_completions, fetch_habit_completions, get_completion_rates
from habitscore.features.habits.toggle import toggle_completion
from habitscore.features.scores.dates import parse_day, parse_range

router = APIRouter()


class CompletionToggleRequest(BaseModel):
    date: str = Field(..., min_length=1, description="Day of the completion, ISO 8601")
    notes: Optional[str] = Field(default=None, max_length=200)


@router.post("/v1/habits/{habit_id}/complete")
def post_toggle_completion(
    habit_id: str,
    body: CompletionToggleRequest,
    user_id: str = Depends(get_current_user_id),
):
    """Toggle a completion; the day's score is recalculated before responding."""
    result = toggle_completion(
        user_id,
        habit_id,
        parse_day(body.date),
        notes=body.notes,
    )
    payload = {"success": True, "data": result.model_dump(mode="json")}
    return JSONResponse(status_code=201 if result.created else 200, content=payload)


@router.get("/v1/habits/completions/range", response_model=Dict[str, Any])
def get_completions_range(
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    start, end = parse_range(startDate, endDate)
    records = fetch_completions(user_id, start, end)
    return {"success": True, "data": [r.model_dump(mode="json") for r in records]}


@router.get("/v1/habits/completion-rates", response_model=Dict[str, Any])
def get_habit_completion_rates(
    year: int = Query(..., description="Calendar year"),
    month: int = Query(..., description="Month, 1-12"),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    rates = get_completion_rates(user_id, year, month)
    return {"success": True, "data": [r.model_dump(mode="json") for r in rates]}


@router.get("/v1/habits/{habit_id}/completions", response_model=Dict[str, Any])
def get_habit_completions(
    habit_id: str,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Completion records for one of the caller's active habits."""
    start, end = parse_range(startDate, endDate)
    records = fetch_habit_completions(user_id, habit_id, start, end)
    return {"success": True, "data": [r.model_dump(mode="json") for r in records]}
