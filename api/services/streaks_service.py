"""Streak calculation utilities.

Rules:
- current_streak counts consecutive completed days ending *today*.
  If today has no completion the current streak is 0, even when
  yesterday and the days before form an unbroken run. There is no
  grace day.
- longest_streak is the longest run of consecutive days anywhere in
  history.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from services.dates_service import Clock, today as utc_today

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class StreakStats:
    current_streak: int
    longest_streak: int


def current_streak(days: Iterable[date], *, today: date) -> int:
    """Count consecutive days ending at ``today``.

    Args:
        days: Completion days (any order, duplicates allowed)
        today: Anchor day for the walk

    Returns:
        Number of consecutive days from today backward, 0 if today is missing
    """
    streak = 0
    expected = today

    # The first mismatch ends the walk, including a day later than today
    for day in sorted(set(days), reverse=True):
        if day != expected:
            break
        streak += 1
        expected -= ONE_DAY

    return streak


def longest_streak(days: Iterable[date]) -> int:
    """Length of the longest run of consecutive days."""
    longest = 0
    run = 0
    previous: date | None = None

    for day in sorted(set(days)):
        if previous is not None and day - previous == ONE_DAY:
            run += 1
        else:
            run = 1
        if run > longest:
            longest = run
        previous = day

    return longest


def calculate_streaks(
    days: Iterable[date], *, clock: Clock | None = None
) -> StreakStats:
    """Calculate current and longest streak for one set of completion days."""
    unique_days = frozenset(days)
    return StreakStats(
        current_streak=current_streak(unique_days, today=utc_today(clock)),
        longest_streak=longest_streak(unique_days),
    )
