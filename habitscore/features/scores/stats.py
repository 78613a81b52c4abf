"""
habitscore/features/scores/stats.py

Pure deterministic fold: DailyScore sequence -> ScoreStats.
Same scores in => identical stats out. No storage access.
"""

from typing import Optional, Sequence

from habitscore.features.scores.dates import is_next_day
from habitscore.models.score import DailyScore, ScoreStats


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (inputs are >= 0)."""
    return int(value + 0.5)


def _best_day(ordered: Sequence[DailyScore]) -> DailyScore:
    best = ordered[0]
    for score in ordered[1:]:
        # Strict comparison keeps the earliest date on ties
        if score.score > best.score:
            best = score
    return best


def current_streak(ordered: Sequence[DailyScore]) -> int:
    """
    Trailing run of 100% days, scanning back from the most recent row.

    Stops at the first non-100% row or at a calendar gap between two rows;
    a missing day counts as 0%.
    """
    streak = 0
    later: Optional[DailyScore] = None
    for score in reversed(ordered):
        if not score.is_perfect:
            break
        if later is not None and not is_next_day(score.date, later.date):
            break
        streak += 1
        later = score
    return streak


def longest_streak(ordered: Sequence[DailyScore]) -> int:
    longest = 0
    running = 0
    previous: Optional[DailyScore] = None
    for score in ordered:
        if score.is_perfect:
            if running and previous is not None and is_next_day(previous.date, score.date):
                running += 1
            else:
                running = 1
            longest = max(longest, running)
        else:
            running = 0
        previous = score
    return longest


def reduce_score_stats(scores: Sequence[DailyScore]) -> ScoreStats:
    """
    Fold daily scores into ScoreStats.

    Args:
        scores: DailyScore rows for one user; re-sorted ascending by date

    Returns:
        ScoreStats (immutable); zero-valued when scores is empty
    """
    if not scores:
        return ScoreStats.empty()

    ordered = sorted(scores, key=lambda s: s.date)
    count = len(ordered)
    total_score = sum(s.score for s in ordered)

    return ScoreStats(
        total_score=total_score,
        average_score=round_half_up(total_score / count),
        average_percentage=round_half_up(sum(s.percentage for s in ordered) / count),
        best_day=_best_day(ordered),
        current_streak=current_streak(ordered),
        longest_streak=longest_streak(ordered),
        scores=ordered,
    )
