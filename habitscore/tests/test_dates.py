"""Tests for calendar-day normalization and range parsing."""

from datetime import date, datetime, timedelta, timezone

import pytest

from habitscore.core.errors import ValidationError
from habitscore.features.scores.dates import (
    FixedClock,
    current_month,
    is_next_day,
    iter_days,
    month_bounds,
    normalize_day,
    parse_day,
    parse_range,
)


class TestNormalizeDay:
    def test_datetime_truncated_to_utc_day(self):
        late_evening_ny = datetime(2025, 3, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert normalize_day(late_evening_ny) == date(2025, 3, 16)

    def test_naive_datetime_treated_as_utc(self):
        assert normalize_day(datetime(2025, 3, 15, 23, 59)) == date(2025, 3, 15)

    def test_date_passthrough(self):
        assert normalize_day(date(2025, 1, 31)) == date(2025, 1, 31)

    def test_iso_strings(self):
        assert normalize_day("2025-03-15") == date(2025, 3, 15)
        assert normalize_day("2025-03-15T10:00:00Z") == date(2025, 3, 15)
        assert normalize_day("2025-03-15T22:00:00-05:00") == date(2025, 3, 16)

    def test_malformed_string_rejected(self):
        with pytest.raises(ValidationError):
            normalize_day("15/03/2025")


class TestParseRange:
    def test_inclusive_range(self):
        assert parse_range("2025-03-01", "2025-03-03") == (date(2025, 3, 1), date(2025, 3, 3))

    def test_single_day_range(self):
        assert parse_range("2025-03-01", "2025-03-01") == (date(2025, 3, 1), date(2025, 3, 1))

    def test_missing_start(self):
        with pytest.raises(ValidationError, match="startDate is required"):
            parse_range(None, "2025-03-01")

    def test_blank_end(self):
        with pytest.raises(ValidationError, match="endDate is required"):
            parse_range("2025-03-01", "  ")

    def test_end_before_start(self):
        with pytest.raises(ValidationError, match="must not be before"):
            parse_range("2025-03-02", "2025-03-01")

    def test_malformed_names_field(self):
        with pytest.raises(ValidationError, match="endDate"):
            parse_range("2025-03-01", "not-a-date")

    def test_parse_day_required(self):
        with pytest.raises(ValidationError, match="date is required"):
            parse_day("")


class TestMonthHelpers:
    def test_month_bounds_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_month_bounds_rejects_bad_month(self):
        with pytest.raises(ValidationError):
            month_bounds(2025, 13)

    def test_current_month_uses_clock(self):
        clock = FixedClock(datetime(2025, 12, 31, 23, 0, tzinfo=timezone.utc))
        assert current_month(clock) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_current_month_converts_to_utc(self):
        # 2025-03-31 21:00 at UTC-5 is already April in UTC
        clock = FixedClock(datetime(2025, 3, 31, 21, 0, tzinfo=timezone(timedelta(hours=-5))))
        assert current_month(clock)[0] == date(2025, 4, 1)

    def test_iter_days_ascending_across_month_end(self):
        days = list(iter_days(date(2025, 2, 27), date(2025, 3, 2)))
        assert days == [date(2025, 2, 27), date(2025, 2, 28), date(2025, 3, 1), date(2025, 3, 2)]

    def test_is_next_day(self):
        assert is_next_day(date(2025, 2, 28), date(2025, 3, 1))
        assert not is_next_day(date(2025, 3, 1), date(2025, 3, 3))
