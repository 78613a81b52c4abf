import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from habitscore.models.score import DailyScore, ScoreStats
from habitscore.models.user import User


class Habit(BaseModel):
    model_config = ConfigDict(frozen=True)

    habit_id: str
    user_id: str
    name: str
    is_active: bool = True
    created_at: dt.datetime


class CompletionRecord(BaseModel):
    """One (user, habit, calendar day) completion flag."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    habit_id: str
    date: dt.date
    completed: bool
    notes: Optional[str] = None


class CompletionToggleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed: bool
    date: dt.date
    notes: Optional[str] = None
    created: bool = Field(description="True when the record did not exist before the toggle")
    score: DailyScore


class HabitCompletionRate(BaseModel):
    model_config = ConfigDict(frozen=True)

    habit_id: str
    name: str
    completed_days: int = Field(ge=0)
    total_days: int = Field(ge=0)
    completion_rate: int = Field(ge=0, le=100)


class MonthCalendar(BaseModel):
    """A user's active habits and every completion record in one month."""

    model_config = ConfigDict(frozen=True)

    user: User
    habits: List[Habit]
    completions: List[CompletionRecord]
    year: int
    month: int = Field(ge=1, le=12)
    days_in_month: int = Field(ge=28, le=31)


class UserMonthOverview(BaseModel):
    """Buddy view: month-to-date stats with the habits and completions behind them."""

    model_config = ConfigDict(frozen=True)

    user: User
    habits: List[Habit]
    stats: ScoreStats
    completions: List[CompletionRecord] = Field(description="Completed records this month")
