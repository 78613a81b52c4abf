"""
Score engine operations exposed to collaborators.

Completion toggles call record_completion_change; everything else is a pull
read against the score store.
"""

from typing import List, Optional

from habitscore.core.database import get_db_session, storage_errors
from habitscore.core.logging import log_event
from habitscore.features.scores.calculator import calculate_daily_score, recalculate_range
from habitscore.features.scores.dates import Clock, DayLike, current_month, parse_range
from habitscore.features.scores.stats import reduce_score_stats
from habitscore.features.scores.store import ScoreStore
from habitscore.models.score import DailyScore, ScoreStats

__all__ = [
    "record_completion_change",
    "fetch_scores",
    "get_score_stats",
    "fetch_month_stats",
    "recalculate_range",
]


def record_completion_change(user_id: str, day: DayLike, *, clock: Optional[Clock] = None) -> DailyScore:
    """Recompute the day's score after a completion for (user_id, day) changed."""
    return calculate_daily_score(user_id, day, clock=clock)


def fetch_scores(user_id: str, start: Optional[DayLike], end: Optional[DayLike]) -> List[DailyScore]:
    start_day, end_day = parse_range(start, end)
    with storage_errors("Score range fetch"):
        with get_db_session() as session:
            return ScoreStore(session).fetch_range(user_id, start_day, end_day)


def get_score_stats(user_id: str, start: Optional[DayLike], end: Optional[DayLike]) -> ScoreStats:
    """ScoreStats over [start, end]. Never fails for lack of data."""
    stats = reduce_score_stats(fetch_scores(user_id, start, end))
    log_event(
        "info",
        "stats.computed",
        user_id=user_id,
        event_type="stats.computed",
        extra={"days": len(stats.scores), "current_streak": stats.current_streak},
    )
    return stats


def fetch_month_stats(user_id: str, *, clock: Optional[Clock] = None) -> ScoreStats:
    """ScoreStats for the calendar month containing clock.now()."""
    start, end = current_month(clock)
    return get_score_stats(user_id, start, end)
