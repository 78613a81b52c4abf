"""
Score calculator: the only writer of daily_scores.

calculate_daily_score(user_id, day) counts the user's active habits and the
day's completions, derives score/percentage and upserts the row, all inside
one transaction.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from habitscore.core.config import settings
from habitscore.core.database import get_db_session, storage_errors
from habitscore.core.errors import StorageError, ValidationError
from habitscore.core.logging import log_event
from habitscore.features.habits.completions import count_completed
from habitscore.features.habits.registry import count_active_habits
from habitscore.features.scores.dates import Clock, DayLike, iter_days, normalize_day, parse_range, system_clock
from habitscore.features.scores.store import ScoreStore
from habitscore.features.users.service import get_or_create_user
from habitscore.models.score import DailyScore


def _utc_now(clock: Optional[Clock]) -> datetime:
    now = (clock or system_clock).now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _calculate_once(user_id: str, day: date, now: datetime) -> DailyScore:
    with get_db_session() as session:
        total_habits = count_active_habits(session, user_id)
        completed_habits = count_completed(session, user_id, day)
        candidate = DailyScore.derive(
            user_id=user_id,
            day=day,
            total_habits=total_habits,
            completed_habits=completed_habits,
            created_at=now,
            updated_at=now,
        )
        return ScoreStore(session).upsert(candidate)


def calculate_daily_score(user_id: str, day: DayLike, *, clock: Optional[Clock] = None) -> DailyScore:
    """
    Recompute and persist the DailyScore for (user_id, day).

    Idempotent: with unchanged completions/habits and the same clock reading
    the returned record is identical. Storage failures raise StorageError
    and leave no partial row.
    """
    score_day = normalize_day(day)
    now = _utc_now(clock)

    # Anyone with a score belongs to the leaderboard population
    get_or_create_user(user_id)

    with storage_errors(f"Score calculation for {score_day.isoformat()}"):
        try:
            score = _calculate_once(user_id, score_day, now)
        except IntegrityError:
            # Lost an insert race on (user_id, date); the row exists now, so update it
            score = _calculate_once(user_id, score_day, now)

    log_event(
        "info",
        "score.calculated",
        user_id=user_id,
        event_type="score.calculated",
        extra={
            "date": score.date.isoformat(),
            "completed": score.completed_habits,
            "total": score.total_habits,
            "score": score.score,
        },
    )
    return score


def recalculate_range(
    user_id: str,
    start: Optional[DayLike],
    end: Optional[DayLike],
    *,
    clock: Optional[Clock] = None,
) -> List[DailyScore]:
    """
    Re-run calculate_daily_score for every calendar day in [start, end],
    ascending. Each day commits on its own; a failure stops the batch at that
    day and leaves earlier days persisted.
    """
    start_day, end_day = parse_range(start, end)
    span = (end_day - start_day).days + 1
    max_days = settings.RECALCULATE_MAX_DAYS
    if max_days is not None and span > max_days:
        raise ValidationError(f"Recalculation window is {span} days; the maximum is {max_days}")

    scores: List[DailyScore] = []
    for day in iter_days(start_day, end_day):
        try:
            scores.append(calculate_daily_score(user_id, day, clock=clock))
        except StorageError as exc:
            log_event(
                "error",
                "score.recalculate_failed",
                user_id=user_id,
                event_type="score.recalculate_failed",
                error_code=exc.code,
                extra={"failed_day": day.isoformat(), "completed_days": len(scores)},
            )
            raise StorageError(
                f"Recalculation stopped at {day.isoformat()} after {len(scores)} day(s)"
            ) from exc

    log_event(
        "info",
        "score.recalculated",
        user_id=user_id,
        event_type="score.recalculated",
        extra={"start": start_day.isoformat(), "end": end_day.isoformat(), "days": len(scores)},
    )
    return scores
