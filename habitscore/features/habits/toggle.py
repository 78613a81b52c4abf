"""
Completion toggle: the write that triggers score recalculation.

The completion write commits first, then the day's score is recalculated
synchronously so a returned toggle is never ahead of the score store.
"""

from typing import Optional

from sqlalchemy import select, insert, update, and_

from habitscore.core.database import get_db_session, habit_completions, storage_errors
from habitscore.core.errors import NotFoundError, ValidationError
from habitscore.core.logging import log_event
from habitscore.features.habits.registry import get_active_habit
from habitscore.features.scores.dates import Clock, DayLike, normalize_day, system_clock
from habitscore.features.scores.service import record_completion_change
from habitscore.models.habit import CompletionToggleResult

MAX_NOTES_LENGTH = 200


def toggle_completion(
    user_id: str,
    habit_id: str,
    day: DayLike,
    *,
    notes: Optional[str] = None,
    clock: Optional[Clock] = None,
) -> CompletionToggleResult:
    """
    Flip the completion flag for (user_id, habit_id, day), creating it as
    completed when absent. notes replace the stored notes only when given.
    """
    completion_day = normalize_day(day)
    if notes is not None:
        notes = notes.strip()
        if len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes must be less than {MAX_NOTES_LENGTH} characters")

    with storage_errors("Completion toggle"):
        with get_db_session() as session:
            if get_active_habit(session, user_id, habit_id) is None:
                raise NotFoundError("Habit not found")

            key = and_(
                habit_completions.c.user_id == user_id,
                habit_completions.c.habit_id == habit_id,
                habit_completions.c.date == completion_day,
            )
            existing = session.execute(select(habit_completions).where(key)).first()

            if existing is None:
                created = True
                completed = True
                stored_notes = notes or ""
                session.execute(
                    insert(habit_completions).values(
                        user_id=user_id,
                        habit_id=habit_id,
                        date=completion_day,
                        completed=True,
                        notes=stored_notes,
                        created_at=(clock or system_clock).now(),
                    )
                )
            else:
                created = False
                completed = not bool(existing.completed)
                stored_notes = notes if notes is not None else existing.notes
                session.execute(
                    update(habit_completions).where(key).values(completed=completed, notes=stored_notes)
                )

    score = record_completion_change(user_id, completion_day, clock=clock)

    log_event(
        "info",
        "completion.toggled",
        user_id=user_id,
        event_type="completion.toggled",
        extra={"habit_id": habit_id, "date": completion_day.isoformat(), "completed": completed},
    )
    return CompletionToggleResult(
        completed=completed,
        date=completion_day,
        notes=stored_notes,
        created=created,
        score=score,
    )
