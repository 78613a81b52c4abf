"""
Completion store queries: counts for the score calculator, range reads and
monthly per-habit completion rates.
"""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select, and_, func, case
from sqlalchemy.orm import Session

from habitscore.core.database import get_db_session, habits, habit_completions, storage_errors
from habitscore.core.errors import NotFoundError
from habitscore.features.habits.registry import get_active_habit, list_active_habits
from habitscore.features.scores.dates import month_bounds
from habitscore.models.habit import CompletionRecord, HabitCompletionRate


def count_completed(session: Session, user_id: str, day: date) -> int:
    """
    Completed records for user_id on day, counted over the user's active
    habits only so completed_habits never exceeds total_habits.
    """
    return session.execute(
        select(func.count())
        .select_from(
            habit_completions.join(
                habits,
                and_(
                    habits.c.id == habit_completions.c.habit_id,
                    habits.c.user_id == habit_completions.c.user_id,
                ),
            )
        )
        .where(
            and_(
                habit_completions.c.user_id == user_id,
                habit_completions.c.date == day,
                habit_completions.c.completed.is_(True),
                habits.c.is_active.is_(True),
            )
        )
    ).scalar_one()


def _row_to_record(row) -> CompletionRecord:
    return CompletionRecord(
        user_id=row.user_id,
        habit_id=row.habit_id,
        date=row.date,
        completed=bool(row.completed),
        notes=row.notes,
    )


def _select_completions(
    session: Session,
    user_id: str,
    start: date,
    end: date,
    *,
    habit_id: Optional[str] = None,
    completed_only: bool = False,
) -> List[CompletionRecord]:
    conditions = [
        habit_completions.c.user_id == user_id,
        habit_completions.c.date >= start,
        habit_completions.c.date <= end,
    ]
    if habit_id is not None:
        conditions.append(habit_completions.c.habit_id == habit_id)
    if completed_only:
        conditions.append(habit_completions.c.completed.is_(True))
    rows = session.execute(
        select(habit_completions)
        .where(and_(*conditions))
        .order_by(habit_completions.c.date.asc(), habit_completions.c.habit_id.asc())
    ).all()
    return [_row_to_record(row) for row in rows]


def fetch_completions(
    user_id: str,
    start: date,
    end: date,
    *,
    habit_id: Optional[str] = None,
    completed_only: bool = False,
) -> List[CompletionRecord]:
    """
    Completion records in [start, end], ascending by date then habit.

    Both completed and uncompleted records are returned unless
    completed_only is set; habit_id narrows the read to one habit.
    """
    with storage_errors("Completion range fetch"):
        with get_db_session() as session:
            return _select_completions(
                session, user_id, start, end, habit_id=habit_id, completed_only=completed_only
            )


def fetch_habit_completions(user_id: str, habit_id: str, start: date, end: date) -> List[CompletionRecord]:
    """Records for one of the caller's active habits; NotFoundError otherwise."""
    with storage_errors("Habit completion fetch"):
        with get_db_session() as session:
            if get_active_habit(session, user_id, habit_id) is None:
                raise NotFoundError("Habit not found")
            return _select_completions(session, user_id, start, end, habit_id=habit_id)


def get_completion_rates(user_id: str, year: int, month: int) -> List[HabitCompletionRate]:
    """
    Per-habit completion rate for one calendar month.

    completed_days counts completed records in the month; total_days counts
    all records in the month, or the days in the month for a habit with no
    records at all.
    """
    start, end = month_bounds(year, month)
    days_in_month = (end - start).days + 1

    with storage_errors("Completion rate query"):
        active = list_active_habits(user_id)
        with get_db_session() as session:
            rows = session.execute(
                select(
                    habit_completions.c.habit_id,
                    func.count().label("total_days"),
                    func.sum(case((habit_completions.c.completed.is_(True), 1), else_=0)).label("completed_days"),
                )
                .where(
                    and_(
                        habit_completions.c.user_id == user_id,
                        habit_completions.c.date >= start,
                        habit_completions.c.date <= end,
                    )
                )
                .group_by(habit_completions.c.habit_id)
            ).all()

    counts: Dict[str, tuple] = {row.habit_id: (int(row.completed_days or 0), int(row.total_days)) for row in rows}

    rates: List[HabitCompletionRate] = []
    for habit in active:
        completed_days, total_days = counts.get(habit.habit_id, (0, days_in_month))
        rate = int(completed_days / total_days * 100 + 0.5) if total_days else 0
        rates.append(
            HabitCompletionRate(
                habit_id=habit.habit_id,
                name=habit.name,
                completed_days=completed_days,
                total_days=total_days,
                completion_rate=rate,
            )
        )
    return rates
