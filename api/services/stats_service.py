"""Dashboard and per-habit statistics.

Every function here is pure: it works only on the snapshots it is handed,
reads the time once from the clock, and recomputes everything per call.

Counting rules:
- "completed" counts on a day are distinct habits, so duplicate events for
  the same (habit, day) count once.
- total_completions is the raw number of stored events and is never
  de-duplicated.
- Account-wide streaks use days on which *any* habit was completed.
- Events are taken as given; the caller scopes them to the user's habits.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import UTC, date, timedelta

from schemas import (
    CompletionEvent,
    DashboardStats,
    DayBucket,
    HabitDayFlag,
    HabitProgressData,
    HabitSnapshot,
)
from services.dates_service import Clock, FixedClock, last_n_days, utc_now
from services.streaks_service import calculate_streaks, current_streak

DEFAULT_WINDOW_DAYS = 7


def round_percentage(numerator: int, denominator: int) -> int:
    """numerator / denominator as a whole percentage, halves rounded up.

    Integer arithmetic, so 1/8 gives 13 rather than the 12 that
    round(12.5) would.
    """
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


def _habits_by_day(events: Iterable[CompletionEvent]) -> dict[date, set[int]]:
    by_day: dict[date, set[int]] = defaultdict(set)
    for event in events:
        by_day[event.day].add(event.habit_id)
    return by_day


def dashboard_stats(
    habits: Sequence[HabitSnapshot],
    recent_events: Iterable[CompletionEvent],
    all_events: Iterable[CompletionEvent],
    *,
    clock: Clock | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> DashboardStats:
    """Account-wide statistics for a user's active habits.

    Args:
        habits: Active habits of the user
        recent_events: Completions inside the window (usually the last 7 days)
        all_events: Every completion for these habits, counted as given
        clock: Time source, system UTC clock when omitted
        window_days: Length of the weekly_progress window

    Returns:
        DashboardStats; the empty value when there are no habits
    """
    total_habits = len(habits)
    if total_habits == 0:
        return DashboardStats.empty()

    # Pin the instant so every day computed below agrees on "today"
    clock = FixedClock(utc_now(clock))
    today = clock.now().date()
    window = last_n_days(window_days, clock=clock, ascending=True)

    recent_by_day = _habits_by_day(recent_events)
    completed_today = len(recent_by_day.get(today, ()))

    weekly_progress = tuple(
        DayBucket(
            day=day,
            completed=len(recent_by_day.get(day, ())),
            total=total_habits,
        )
        for day in window
    )

    history = list(all_events)
    streaks = calculate_streaks((e.day for e in history), clock=clock)

    return DashboardStats(
        total_habits=total_habits,
        completed_today=completed_today,
        completion_percentage_today=round_percentage(completed_today, total_habits),
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
        total_completions=len(history),
        weekly_progress=weekly_progress,
    )


def days_since_creation(habit: HabitSnapshot, *, clock: Clock | None = None) -> int:
    """Whole days since the habit was created, counting the creation day.

    A habit created at any point today is on day 1.
    """
    created_at = habit.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    elapsed = utc_now(clock) - created_at
    return max(1, elapsed // timedelta(days=1) + 1)


def habit_progress(
    habit: HabitSnapshot,
    habit_events: Sequence[CompletionEvent],
    *,
    clock: Clock | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> HabitProgressData:
    """Statistics for one habit.

    Args:
        habit: The habit, active or not
        habit_events: All completions of this habit, most recent first
        clock: Time source, system UTC clock when omitted
        window_days: Length of the weekly_progress window

    Returns:
        HabitProgressData with completion_rate capped at 100
    """
    clock = FixedClock(utc_now(clock))
    today = clock.now().date()
    events = [e for e in habit_events if e.habit_id == habit.habit_id]
    completed_days = frozenset(e.day for e in events)

    total_completions = len(events)
    elapsed_days = days_since_creation(habit, clock=clock)
    completion_rate = min(100, round_percentage(total_completions, elapsed_days))

    weekly_progress = tuple(
        HabitDayFlag(day=day, completed=day in completed_days)
        for day in last_n_days(window_days, clock=clock, ascending=True)
    )

    return HabitProgressData(
        total_completions=total_completions,
        current_streak=current_streak(completed_days, today=today),
        days_since_creation=elapsed_days,
        completion_rate=completion_rate,
        weekly_progress=weekly_progress,
        all_completed_dates=tuple(sorted((e.day for e in events), reverse=True)),
    )
