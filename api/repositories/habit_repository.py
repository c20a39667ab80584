"""Repository for habit operations."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Habit


class HabitRepository:
    """Repository for Habit database operations.

    Every lookup is scoped to the owning user.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_for_user(
        self,
        user_id: str,
        habit_id: int,
        *,
        active_only: bool = True,
    ) -> Habit | None:
        """Get one habit owned by the user.

        Args:
            active_only: Skip soft-deleted habits (the default)
        """
        query = select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        if active_only:
            query = query.where(Habit.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_active_by_user(self, user_id: str) -> Sequence[Habit]:
        """Get a user's active habits, newest first."""
        result = await self.db.execute(
            select(Habit)
            .where(Habit.user_id == user_id, Habit.is_active.is_(True))
            .order_by(Habit.created_at.desc(), Habit.id.desc())
        )
        return result.scalars().all()

    async def create(
        self,
        user_id: str,
        title: str,
        description: str = "",
    ) -> Habit:
        habit = Habit(user_id=user_id, title=title, description=description)
        self.db.add(habit)
        await self.db.flush()
        await self.db.refresh(habit)
        return habit

    async def update(
        self,
        habit: Habit,
        *,
        title: str,
        description: str,
    ) -> Habit:
        habit.title = title
        habit.description = description
        await self.db.flush()
        await self.db.refresh(habit)
        return habit

    async def deactivate(self, habit: Habit) -> Habit:
        """Soft delete. Completion logs are kept."""
        habit.is_active = False
        await self.db.flush()
        return habit
