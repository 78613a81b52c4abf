"""
habitscore/models/leaderboard.py
Monthly leaderboard models.
"""

from datetime import date, datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class UserScoreTotal(BaseModel):
    """Summed month-to-date score for one user, before ranking."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    display_name: str
    score: int = Field(ge=0)


class LeaderboardEntry(BaseModel):
    """Single entry in leaderboard."""

    model_config = ConfigDict(frozen=True)

    rank: int = Field(ge=1, description="1-based position after sort")
    user_id: str = Field(description="User ID")
    display_name: str = Field(description="User display name")
    score: int = Field(ge=0, description="Sum of daily scores this month")


class LeaderboardResponse(BaseModel):
    """Response for leaderboard endpoint."""

    model_config = ConfigDict(frozen=True)

    period_start: date = Field(description="First day of the month")
    period_end: date = Field(description="Last day of the month")
    entries: List[LeaderboardEntry] = Field(description="Every known user, ranked")
    computed_at: datetime = Field(description="When leaderboard was computed")
