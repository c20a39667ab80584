"""Repository for habit completion logs."""

from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import HabitLog
from repositories.utils import log_slow_query


class HabitLogRepository:
    """Repository for HabitLog operations (completion tracking, streaks)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_habit_and_date(
        self,
        user_id: str,
        habit_id: int,
        completed_date: date,
    ) -> HabitLog | None:
        result = await self.db.execute(
            select(HabitLog).where(
                HabitLog.user_id == user_id,
                HabitLog.habit_id == habit_id,
                HabitLog.completed_date == completed_date,
            )
        )
        return result.scalar_one_or_none()

    async def log_completion(
        self,
        user_id: str,
        habit_id: int,
        completed_date: date,
    ) -> HabitLog:
        """Insert a completion.

        Raises:
            sqlalchemy.exc.IntegrityError: The habit already has a log for that day.
        """
        log = HabitLog(
            user_id=user_id,
            habit_id=habit_id,
            completed_date=completed_date,
        )
        self.db.add(log)
        await self.db.flush()
        await self.db.refresh(log)
        return log

    async def get_for_habit(self, user_id: str, habit_id: int) -> Sequence[HabitLog]:
        """All logs of one habit, most recent day first."""
        result = await self.db.execute(
            select(HabitLog)
            .where(HabitLog.user_id == user_id, HabitLog.habit_id == habit_id)
            .order_by(HabitLog.completed_date.desc(), HabitLog.id.desc())
        )
        return result.scalars().all()

    @log_slow_query("habit_logs.for_habits")
    async def get_for_habits(
        self,
        user_id: str,
        habit_ids: Iterable[int],
        *,
        days: Iterable[date] | None = None,
    ) -> Sequence[HabitLog]:
        """Logs of several habits, most recent day first.

        Args:
            days: Only these days when given, full history otherwise
        """
        ids = list(habit_ids)
        if not ids:
            return []

        query = select(HabitLog).where(
            HabitLog.user_id == user_id,
            HabitLog.habit_id.in_(ids),
        )
        if days is not None:
            query = query.where(HabitLog.completed_date.in_(list(days)))
        query = query.order_by(HabitLog.completed_date.desc(), HabitLog.id.desc())

        result = await self.db.execute(query)
        return result.scalars().all()
