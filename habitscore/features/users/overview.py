"""
Read-only views of another user's month: the calendar grid and the buddy
stats page. Unknown users raise NotFoundError.
"""

from typing import Optional

from habitscore.core.errors import NotFoundError
from habitscore.features.habits.completions import fetch_completions
from habitscore.features.habits.registry import list_active_habits
from habitscore.features.scores.dates import Clock, current_month, month_bounds
from habitscore.features.scores.service import get_score_stats
from habitscore.features.users.service import get_user
from habitscore.models.habit import MonthCalendar, UserMonthOverview
from habitscore.models.user import User


def _require_user(user_id: str) -> User:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_month_calendar(user_id: str, year: int, month: int) -> MonthCalendar:
    start, end = month_bounds(year, month)
    user = _require_user(user_id)
    return MonthCalendar(
        user=user,
        habits=list_active_habits(user_id),
        completions=fetch_completions(user_id, start, end),
        year=year,
        month=month,
        days_in_month=end.day,
    )


def get_month_overview(user_id: str, *, clock: Optional[Clock] = None) -> UserMonthOverview:
    """ScoreStats for the month containing clock.now(), plus that month's completed records."""
    user = _require_user(user_id)
    start, end = current_month(clock)
    return UserMonthOverview(
        user=user,
        habits=list_active_habits(user_id),
        stats=get_score_stats(user_id, start, end),
        completions=fetch_completions(user_id, start, end, completed_only=True),
    )
