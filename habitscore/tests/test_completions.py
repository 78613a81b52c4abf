"""Tests for completion toggles, completion reads and monthly rates."""

from datetime import date

import pytest

from habitscore.core.errors import NotFoundError, ValidationError
from habitscore.features.habits.completions import fetch_completions, fetch_habit_completions, get_completion_rates
from habitscore.features.habits.registry import deactivate_habit, list_active_habits, register_habit
from habitscore.features.habits.toggle import toggle_completion
from habitscore.features.scores.service import fetch_scores
from habitscore.features.users.service import get_user

DAY = date(2025, 3, 10)


class TestToggleCompletion:
    def test_first_toggle_creates_completed_record(self, seed, clock):
        a, _ = seed.habits("u1", "read", "run")

        result = toggle_completion("u1", a, DAY, notes="20 pages", clock=clock)

        assert result.created is True
        assert result.completed is True
        assert result.notes == "20 pages"
        assert result.score.score == 100
        assert result.score.percentage == 50

    def test_second_toggle_flips_and_rescores(self, seed, clock):
        (a,) = seed.habits("u1", "read")
        toggle_completion("u1", a, DAY, clock=clock)

        result = toggle_completion("u1", a, DAY, clock=clock)

        assert result.created is False
        assert result.completed is False
        assert result.score.score == 0
        assert fetch_scores("u1", DAY, DAY)[0].score == 0

    def test_notes_kept_unless_given(self, seed, clock):
        (a,) = seed.habits("u1", "read")
        toggle_completion("u1", a, DAY, notes="first", clock=clock)

        kept = toggle_completion("u1", a, DAY, clock=clock)
        replaced = toggle_completion("u1", a, DAY, notes="second", clock=clock)

        assert kept.notes == "first"
        assert replaced.notes == "second"

    def test_score_row_matches_toggle_result(self, seed, clock):
        (a,) = seed.habits("u1", "read")
        result = toggle_completion("u1", a, "2025-03-10T08:00:00Z", clock=clock)
        assert fetch_scores("u1", DAY, DAY) == [result.score]

    def test_unknown_habit(self, seed, clock):
        seed.user("u1")
        with pytest.raises(NotFoundError):
            toggle_completion("u1", "missing", DAY, clock=clock)

    def test_other_users_habit(self, seed, clock):
        (theirs,) = seed.habits("u2", "read")
        seed.user("u1")
        with pytest.raises(NotFoundError):
            toggle_completion("u1", theirs, DAY, clock=clock)
        assert fetch_completions("u2", DAY, DAY) == []

    def test_inactive_habit(self, seed, clock):
        (a,) = seed.habits("u1", "read")
        deactivate_habit("u1", a)
        with pytest.raises(NotFoundError):
            toggle_completion("u1", a, DAY, clock=clock)

    def test_notes_too_long(self, seed, clock):
        (a,) = seed.habits("u1", "read")
        with pytest.raises(ValidationError):
            toggle_completion("u1", a, DAY, notes="x" * 201, clock=clock)


class TestFetchCompletions:
    def test_range_ordered_by_day(self, seed):
        a, b = seed.habits("u1", "read", "run")
        seed.complete("u1", b, date(2025, 3, 2), completed=False)
        seed.complete("u1", a, date(2025, 3, 1))
        seed.complete("u1", a, date(2025, 3, 5))

        records = fetch_completions("u1", date(2025, 3, 1), date(2025, 3, 4))

        assert [(r.habit_id, r.date, r.completed) for r in records] == [
            (a, date(2025, 3, 1), True),
            (b, date(2025, 3, 2), False),
        ]


    def test_completed_only(self, seed):
        a, b = seed.habits("u1", "read", "run")
        seed.complete("u1", a, date(2025, 3, 1))
        seed.complete("u1", b, date(2025, 3, 1), completed=False)

        records = fetch_completions("u1", date(2025, 3, 1), date(2025, 3, 31), completed_only=True)

        assert [r.habit_id for r in records] == [a]


class TestHabitCompletions:
    def test_filtered_to_one_habit(self, seed):
        a, b = seed.habits("u1", "read", "run")
        seed.complete("u1", a, date(2025, 3, 3))
        seed.complete("u1", a, date(2025, 3, 1), completed=False)
        seed.complete("u1", b, date(2025, 3, 2))

        records = fetch_habit_completions("u1", a, date(2025, 3, 1), date(2025, 3, 31))

        assert [(r.date, r.completed) for r in records] == [(date(2025, 3, 1), False), (date(2025, 3, 3), True)]

    def test_other_users_habit_not_found(self, seed):
        (theirs,) = seed.habits("u2", "read")
        with pytest.raises(NotFoundError):
            fetch_habit_completions("u1", theirs, date(2025, 3, 1), date(2025, 3, 31))

    def test_inactive_habit_not_found(self, seed):
        (a,) = seed.habits("u1", "read")
        deactivate_habit("u1", a)
        with pytest.raises(NotFoundError):
            fetch_habit_completions("u1", a, date(2025, 3, 1), date(2025, 3, 31))


class TestCompletionRates:
    def test_rates_per_active_habit(self, seed):
        a, b, c = seed.habits("u1", "read", "run", "stretch")
        for day in range(1, 11):
            seed.complete("u1", a, date(2025, 3, day), completed=day <= 7)
        seed.complete("u1", c, date(2025, 3, 1))
        seed.complete("u1", c, date(2025, 3, 2), completed=False)
        seed.complete("u1", c, date(2025, 3, 3), completed=False)
        # Outside the month
        seed.complete("u1", b, date(2025, 4, 1))

        rates = {r.habit_id: r for r in get_completion_rates("u1", 2025, 3)}

        assert (rates[a].completed_days, rates[a].total_days, rates[a].completion_rate) == (7, 10, 70)
        assert (rates[b].completed_days, rates[b].total_days, rates[b].completion_rate) == (0, 31, 0)
        assert rates[c].completion_rate == 33

    def test_inactive_habits_excluded(self, seed):
        a, b = seed.habits("u1", "read", "run")
        deactivate_habit("u1", b)
        assert [r.habit_id for r in get_completion_rates("u1", 2025, 3)] == [a]

    def test_invalid_month(self, seed):
        seed.user("u1")
        with pytest.raises(ValidationError):
            get_completion_rates("u1", 2025, 0)


class TestHabitRegistry:
    def test_register_adds_user_to_directory(self):
        register_habit("fresh", "journal")
        assert get_user("fresh") is not None

    def test_register_and_list(self, seed):
        seed.user("u1")
        habit = register_habit("u1", "  meditate  ")
        assert habit.name == "meditate"
        assert [h.habit_id for h in list_active_habits("u1")] == [habit.habit_id]

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            register_habit("u1", "   ")

    def test_deactivate_missing_habit(self):
        with pytest.raises(NotFoundError):
            deactivate_habit("u1", "nope")
