"""
habitscore/models/score.py
Score models: DailyScore (persisted) and ScoreStats (derived per request).
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

POINTS_PER_HABIT = 100


def derive_percentage(completed_habits: int, total_habits: int) -> float:
    """Completion percentage; 0 when the user has no active habits."""
    if total_habits <= 0:
        return 0.0
    return completed_habits / total_habits * 100


class DailyScore(BaseModel):
    """One score per (user_id, date). score and percentage are always derived."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="Owner of the score")
    date: dt.date = Field(description="Calendar day (UTC)")
    total_habits: int = Field(ge=0, description="Active habits at calculation time")
    completed_habits: int = Field(ge=0, description="Completed habits on this day")
    score: int = Field(ge=0, description="completed_habits x 100")
    percentage: float = Field(ge=0, le=100, description="completed/total x 100, 0 with no habits")
    created_at: dt.datetime = Field(description="First calculation for this day")
    updated_at: dt.datetime = Field(description="Most recent calculation for this day")

    @model_validator(mode="after")
    def _check_derived(self) -> "DailyScore":
        if self.completed_habits > self.total_habits:
            raise ValueError("completed_habits cannot exceed total_habits")
        if self.score != self.completed_habits * POINTS_PER_HABIT:
            raise ValueError("score must equal completed_habits x 100")
        if self.percentage != derive_percentage(self.completed_habits, self.total_habits):
            raise ValueError("percentage must be derived from completed_habits/total_habits")
        return self

    @classmethod
    def derive(
        cls,
        *,
        user_id: str,
        day: dt.date,
        total_habits: int,
        completed_habits: int,
        created_at: dt.datetime,
        updated_at: dt.datetime,
    ) -> "DailyScore":
        return cls(
            user_id=user_id,
            date=day,
            total_habits=total_habits,
            completed_habits=completed_habits,
            score=completed_habits * POINTS_PER_HABIT,
            percentage=derive_percentage(completed_habits, total_habits),
            created_at=created_at,
            updated_at=updated_at,
        )

    @property
    def is_perfect(self) -> bool:
        return self.percentage == 100


class ScoreStats(BaseModel):
    """Rolling statistics over a date range. Never persisted."""

    model_config = ConfigDict(frozen=True)

    total_score: int = Field(ge=0)
    average_score: int = Field(ge=0, description="Rounded half-up")
    average_percentage: int = Field(ge=0, le=100, description="Rounded half-up")
    best_day: Optional[DailyScore] = Field(default=None, description="Highest score, earliest date on ties")
    current_streak: int = Field(ge=0, description="Trailing run of 100% days")
    longest_streak: int = Field(ge=0, description="Longest run of 100% days")
    scores: List[DailyScore] = Field(default_factory=list, description="Ascending by date")

    @classmethod
    def empty(cls) -> "ScoreStats":
        return cls(
            total_score=0,
            average_score=0,
            average_percentage=0,
            best_day=None,
            current_streak=0,
            longest_streak=0,
            scores=[],
        )
