"""
Calendar-day helpers shared by the score calculator and aggregators.

All days are UTC calendar days. "Now" always comes from a Clock so tests
can pin it.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Protocol, Tuple, Union

from habitscore.core.errors import ValidationError

DayLike = Union[date, datetime, str]


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to one instant."""

    def __init__(self, instant: datetime):
        self._instant = instant if instant.tzinfo else instant.replace(tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._instant


system_clock = SystemClock()


def normalize_day(value: DayLike) -> date:
    """Truncate a date, datetime or ISO-8601 string to its UTC calendar day."""
    if isinstance(value, str):
        value = parse_day(value)
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return aware.astimezone(timezone.utc).date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Unsupported date value: {value!r}")


def parse_day(raw: Optional[str], field: str = "date") -> date:
    if raw is None or not str(raw).strip():
        raise ValidationError(f"{field} is required")
    text = str(raw).strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return normalize_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO 8601 date, got {text!r}")


def parse_range(start: Optional[DayLike], end: Optional[DayLike]) -> Tuple[date, date]:
    """Normalize an inclusive [start, end] range; end before start is rejected."""
    if start is None or (isinstance(start, str) and not start.strip()):
        raise ValidationError("startDate is required")
    if end is None or (isinstance(end, str) and not end.strip()):
        raise ValidationError("endDate is required")
    start_day = parse_day(start, "startDate") if isinstance(start, str) else normalize_day(start)
    end_day = parse_day(end, "endDate") if isinstance(end, str) else normalize_day(end)
    if end_day < start_day:
        raise ValidationError("endDate must not be before startDate")
    return start_day, end_day


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= year <= 9999:
        raise ValidationError("year is out of range")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def current_month(clock: Optional[Clock] = None) -> Tuple[date, date]:
    today = normalize_day((clock or system_clock).now())
    return month_bounds(today.year, today.month)


def is_next_day(earlier: date, later: date) -> bool:
    return (later - earlier).days == 1
