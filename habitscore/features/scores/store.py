"""
habitscore/features/scores/store.py

Score store: one daily_scores row per (user_id, date).

Only the score calculator writes here; aggregators read.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select, insert, update, and_
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from habitscore.core.database import daily_scores
from habitscore.models.score import DailyScore


def _aware(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def row_to_score(row: Row) -> DailyScore:
    return DailyScore(
        user_id=row.user_id,
        date=row.date,
        total_habits=row.total_habits,
        completed_habits=row.completed_habits,
        score=row.score,
        percentage=row.percentage,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class ScoreStore:
    """Queries against daily_scores, bound to a caller-owned session."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, user_id: str, day: date) -> Optional[DailyScore]:
        row = self._session.execute(
            select(daily_scores).where(
                and_(daily_scores.c.user_id == user_id, daily_scores.c.date == day)
            )
        ).first()
        return row_to_score(row) if row else None

    def upsert(self, score: DailyScore) -> DailyScore:
        """
        Create the row if absent, otherwise overwrite the derived fields and
        updated_at. created_at of an existing row is never touched.

        Returns the persisted record. A concurrent insert of the same key
        surfaces as IntegrityError; the caller retries in a new transaction.
        """
        existing = self.get(score.user_id, score.date)
        if existing is None:
            self._session.execute(
                insert(daily_scores).values(
                    user_id=score.user_id,
                    date=score.date,
                    total_habits=score.total_habits,
                    completed_habits=score.completed_habits,
                    score=score.score,
                    percentage=score.percentage,
                    created_at=score.created_at,
                    updated_at=score.updated_at,
                )
            )
            return score

        self._session.execute(
            update(daily_scores)
            .where(and_(daily_scores.c.user_id == score.user_id, daily_scores.c.date == score.date))
            .values(
                total_habits=score.total_habits,
                completed_habits=score.completed_habits,
                score=score.score,
                percentage=score.percentage,
                updated_at=score.updated_at,
            )
        )
        return score.model_copy(update={"created_at": existing.created_at})

    def fetch_range(self, user_id: str, start: date, end: date) -> List[DailyScore]:
        """All rows for user_id with start <= date <= end, ascending by date."""
        rows = self._session.execute(
            select(daily_scores)
            .where(
                and_(
                    daily_scores.c.user_id == user_id,
                    daily_scores.c.date >= start,
                    daily_scores.c.date <= end,
                )
            )
            .order_by(daily_scores.c.date.asc())
        ).all()
        return [row_to_score(row) for row in rows]
