"""Tests for dashboard routes."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import (
    OTHER_USER_ID,
    TEST_NOW,
    HabitFactory,
    InactiveHabitFactory,
    create_async,
    log_days,
)

# Mark all tests in this module as integration tests (database required)
pytestmark = pytest.mark.integration

TODAY = TEST_NOW.date()


class TestGetDashboard:
    """Tests for GET /api/dashboard endpoint."""

    async def test_returns_401_for_unauthenticated(self, client: AsyncClient):
        response = await client.get("/api/dashboard")

        assert response.status_code == 401

    async def test_no_habits_returns_zeroes(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stats"] == {
            "totalHabits": 0,
            "completedToday": 0,
            "completionPercentageToday": 0,
            "currentStreak": 0,
            "longestStreak": 0,
            "totalCompletions": 0,
            "weeklyProgress": [],
        }

    async def test_aggregates_habits(
        self, authenticated_client: AsyncClient, db_session: AsyncSession
    ):
        habits = [await create_async(HabitFactory, db_session) for _ in range(3)]
        deleted = await create_async(InactiveHabitFactory, db_session)
        foreign = await create_async(HabitFactory, db_session, user_id=OTHER_USER_ID)
        days = [TODAY - timedelta(days=n) for n in range(4)]
        db_session.add_all(
            log_days(habits[0], days)
            + log_days(habits[1], [TODAY, TODAY - timedelta(days=20)])
            + log_days(deleted, [TODAY])
            + log_days(foreign, [TODAY])
        )
        await db_session.commit()

        response = await authenticated_client.get("/api/dashboard")

        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["totalHabits"] == 3
        assert stats["completedToday"] == 2
        assert stats["completionPercentageToday"] == 67
        assert stats["currentStreak"] == 4
        assert stats["longestStreak"] == 4
        assert stats["totalCompletions"] == 6

        weekly = stats["weeklyProgress"]
        assert len(weekly) == 7
        assert weekly[0]["day"] == (TODAY - timedelta(days=6)).isoformat()
        assert weekly[-1] == {"day": TODAY.isoformat(), "completed": 2, "total": 3}
        assert [d["completed"] for d in weekly] == [0, 0, 0, 1, 1, 1, 2]

    async def test_reflects_completion_made_through_api(
        self, authenticated_client: AsyncClient, db_session: AsyncSession
    ):
        first = await create_async(HabitFactory, db_session)
        await create_async(HabitFactory, db_session)
        await db_session.commit()

        await authenticated_client.post(f"/api/habits/{first.id}/complete")
        response = await authenticated_client.get("/api/dashboard")

        stats = response.json()["stats"]
        assert stats["completedToday"] == 1
        assert stats["completionPercentageToday"] == 50
        assert stats["currentStreak"] == 1
