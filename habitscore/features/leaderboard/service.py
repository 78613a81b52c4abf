"""
habitscore/features/leaderboard/service.py

Monthly leaderboard: every known user ranked by the sum of their daily
scores in the calendar month containing clock.now().

Recomputed on every call; nothing is cached or persisted.
"""

from datetime import date, timezone
from typing import List, Optional, Sequence

from sqlalchemy import select, and_, func

from habitscore.core.database import get_db_session, daily_scores, users as app_users, storage_errors
from habitscore.core.logging import log_event
from habitscore.features.scores.dates import Clock, month_bounds, normalize_day, system_clock
from habitscore.models.leaderboard import LeaderboardEntry, LeaderboardResponse, UserScoreTotal
from habitscore.models.user import User


def reduce_leaderboard(totals: Sequence[UserScoreTotal]) -> List[LeaderboardEntry]:
    """
    Rank monthly totals.

    Pure function: same totals => identical entries in the same order.
    Stable sort: score descending, then user_id ascending for ties.
    """
    ordered = sorted(totals, key=lambda t: (-t.score, t.user_id))
    return [
        LeaderboardEntry(
            rank=position,
            user_id=total.user_id,
            display_name=total.display_name,
            score=total.score,
        )
        for position, total in enumerate(ordered, start=1)
    ]


def monthly_totals(start: date, end: date) -> List[UserScoreTotal]:
    """
    One grouped query: every user outer-joined to their daily_scores rows in
    [start, end]; users without rows sum to 0.
    """
    summed = func.coalesce(func.sum(daily_scores.c.score), 0)
    stmt = (
        select(app_users.c.user_id, app_users.c.display_name, summed.label("score"))
        .select_from(
            app_users.outerjoin(
                daily_scores,
                and_(
                    daily_scores.c.user_id == app_users.c.user_id,
                    daily_scores.c.date >= start,
                    daily_scores.c.date <= end,
                ),
            )
        )
        .group_by(app_users.c.user_id, app_users.c.display_name)
    )
    with storage_errors("Leaderboard aggregation"):
        with get_db_session() as session:
            rows = session.execute(stmt).all()
    return [
        UserScoreTotal(
            user_id=row.user_id,
            display_name=User.normalized_display_name(row.user_id, row.display_name),
            score=int(row.score),
        )
        for row in rows
    ]


def get_leaderboard(clock: Optional[Clock] = None) -> LeaderboardResponse:
    """Rank every known user over the calendar month containing clock.now()."""
    now = (clock or system_clock).now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    # One clock reading drives both the window and computed_at
    today = normalize_day(now)
    start, end = month_bounds(today.year, today.month)

    entries = reduce_leaderboard(monthly_totals(start, end))
    log_event(
        "info",
        "leaderboard.computed",
        event_type="leaderboard.computed",
        extra={"period_start": start.isoformat(), "users": len(entries)},
    )
    return LeaderboardResponse(
        period_start=start,
        period_end=end,
        entries=entries,
        computed_at=now,
    )


def fetch_leaderboard(clock: Optional[Clock] = None) -> List[LeaderboardEntry]:
    """Ranked entries for the current month."""
    return list(get_leaderboard(clock).entries)
