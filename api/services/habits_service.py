"""Habit service: habit management, completion tracking, and statistics.

This module handles:
- Habit create / read / update / soft delete for the owning user
- Logging today's completion (one per habit per day)
- Loading snapshots and handing them to the statistics engine

Routes should use this service for all habit-related business logic.
"""

from collections.abc import Iterable, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from models import Habit, HabitLog
from repositories import HabitLogRepository, HabitRepository
from schemas import (
    CompletionEvent,
    DashboardStats,
    HabitData,
    HabitLogData,
    HabitProgressResult,
    HabitSnapshot,
    HabitSummaryData,
)
from services.dates_service import Clock, FixedClock, last_n_days, utc_now
from services.stats_service import (
    DEFAULT_WINDOW_DAYS,
    dashboard_stats,
    habit_progress,
)

logger = get_logger(__name__)


class HabitNotFoundError(Exception):
    """Raised when a habit does not exist, is not the user's, or was deleted."""

    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} not found")


class HabitAlreadyCompletedError(Exception):
    """Raised when a habit already has a completion for today."""

    def __init__(self, habit_id: int, log: HabitLog | None = None):
        self.habit_id = habit_id
        self.completed_at = log.created_at if log is not None else None
        super().__init__(f"Habit {habit_id} already completed for today")


def _to_snapshot(habit: Habit) -> HabitSnapshot:
    return HabitSnapshot(
        habit_id=habit.id,
        created_at=habit.created_at,
        is_active=habit.is_active,
    )


def _to_events(logs: Iterable[HabitLog]) -> list[CompletionEvent]:
    return [
        CompletionEvent(habit_id=log.habit_id, day=log.completed_date) for log in logs
    ]


def _to_habit_data(habit: Habit, completed_today: bool) -> HabitData:
    return HabitData(
        id=habit.id,
        title=habit.title,
        description=habit.description,
        is_active=habit.is_active,
        created_at=habit.created_at,
        updated_at=habit.updated_at,
        completed_today=completed_today,
    )


async def _get_habit_or_raise(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    active_only: bool = True,
) -> Habit:
    habit = await HabitRepository(db).get_for_user(
        user_id, habit_id, active_only=active_only
    )
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


async def list_habits(
    db: AsyncSession,
    user_id: str,
    *,
    clock: Clock | None = None,
) -> list[HabitData]:
    """Active habits, newest first, each flagged with today's completion."""
    habits = await HabitRepository(db).get_active_by_user(user_id)
    if not habits:
        return []

    today = utc_now(clock).date()
    today_logs = await HabitLogRepository(db).get_for_habits(
        user_id, [h.id for h in habits], days=[today]
    )
    completed_ids = {log.habit_id for log in today_logs}

    return [_to_habit_data(h, h.id in completed_ids) for h in habits]


async def get_habit(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    clock: Clock | None = None,
) -> HabitData:
    """Get one active habit.

    Raises:
        HabitNotFoundError: If the habit is missing, foreign, or deleted
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id)
    log = await HabitLogRepository(db).get_by_habit_and_date(
        user_id, habit.id, utc_now(clock).date()
    )
    return _to_habit_data(habit, log is not None)


async def create_habit(
    db: AsyncSession,
    user_id: str,
    title: str,
    description: str = "",
) -> HabitData:
    habit = await HabitRepository(db).create(user_id, title, description)
    logger.info("habit.created", user_id=user_id, habit_id=habit.id)
    return _to_habit_data(habit, completed_today=False)


async def update_habit(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    title: str,
    description: str,
    clock: Clock | None = None,
) -> HabitData:
    """Change title and description of an active habit.

    Raises:
        HabitNotFoundError: If the habit is missing, foreign, or deleted
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id)
    habit = await HabitRepository(db).update(
        habit, title=title, description=description
    )
    log = await HabitLogRepository(db).get_by_habit_and_date(
        user_id, habit.id, utc_now(clock).date()
    )
    logger.info("habit.updated", user_id=user_id, habit_id=habit.id)
    return _to_habit_data(habit, log is not None)


async def delete_habit(db: AsyncSession, user_id: str, habit_id: int) -> None:
    """Soft delete a habit. Its completion history stays in place.

    Raises:
        HabitNotFoundError: If the habit is missing, foreign, or already deleted
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id)
    await HabitRepository(db).deactivate(habit)
    logger.info("habit.deleted", user_id=user_id, habit_id=habit.id)


async def complete_habit(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    clock: Clock | None = None,
) -> HabitLogData:
    """Record today's (UTC) completion of an active habit.

    Raises:
        HabitNotFoundError: If the habit is missing, foreign, or deleted
        HabitAlreadyCompletedError: If today's completion already exists
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id)
    today = utc_now(clock).date()
    log_repo = HabitLogRepository(db)

    existing = await log_repo.get_by_habit_and_date(user_id, habit.id, today)
    if existing is not None:
        raise HabitAlreadyCompletedError(habit.id, existing)

    try:
        log = await log_repo.log_completion(user_id, habit.id, today)
    except IntegrityError as e:
        # Lost a race with a concurrent request for the same day. The failed
        # flush leaves the session unusable until it is rolled back.
        await db.rollback()
        raise HabitAlreadyCompletedError(habit.id) from e

    logger.info(
        "habit.completed",
        user_id=user_id,
        habit_id=habit.id,
        day=today.isoformat(),
    )
    return HabitLogData.model_validate(log)


async def get_habit_logs(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
) -> list[HabitLogData]:
    """Full completion history of a habit, deleted or not, most recent first.

    Raises:
        HabitNotFoundError: If the habit is missing or foreign
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id, active_only=False)
    logs = await HabitLogRepository(db).get_for_habit(user_id, habit.id)
    return [HabitLogData.model_validate(log) for log in logs]


async def get_habit_progress(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    clock: Clock | None = None,
) -> HabitProgressResult:
    """Chart-ready progress for one habit, deleted or not.

    Raises:
        HabitNotFoundError: If the habit is missing or foreign
    """
    habit = await _get_habit_or_raise(db, user_id, habit_id, active_only=False)
    logs: Sequence[HabitLog] = await HabitLogRepository(db).get_for_habit(
        user_id, habit.id
    )

    progress = habit_progress(
        _to_snapshot(habit),
        _to_events(logs),
        clock=clock,
    )
    return HabitProgressResult(
        habit=HabitSummaryData.model_validate(habit),
        progress=progress,
    )


async def get_dashboard_stats(
    db: AsyncSession,
    user_id: str,
    *,
    clock: Clock | None = None,
) -> DashboardStats:
    """Account-wide statistics over the user's active habits."""
    habits = await HabitRepository(db).get_active_by_user(user_id)
    if not habits:
        return DashboardStats.empty()

    # Same instant for the window query and the engine
    clock = FixedClock(utc_now(clock))
    habit_ids = [h.id for h in habits]
    log_repo = HabitLogRepository(db)

    recent_logs = await log_repo.get_for_habits(
        user_id, habit_ids, days=last_n_days(DEFAULT_WINDOW_DAYS, clock=clock)
    )
    all_logs = await log_repo.get_for_habits(user_id, habit_ids)

    stats = dashboard_stats(
        [_to_snapshot(h) for h in habits],
        _to_events(recent_logs),
        _to_events(all_logs),
        clock=clock,
    )
    logger.debug(
        "dashboard.computed",
        user_id=user_id,
        total_habits=stats.total_habits,
        total_completions=stats.total_completions,
    )
    return stats
