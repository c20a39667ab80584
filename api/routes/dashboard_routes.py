"""Dashboard endpoint: account-wide habit statistics."""

from fastapi import APIRouter, Request

from core.auth import UserId
from core.clock import RequestClock
from core.database import DbSession
from core.ratelimit import READ_LIMIT, limiter
from schemas import DashboardResponse
from services.habits_service import get_dashboard_stats

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
@limiter.limit(READ_LIMIT)
async def get_dashboard_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
) -> DashboardResponse:
    """Overall stats for the current user.

    Returns:
    - Today's completion count and percentage
    - Current and longest streak across all habits
    - Total completions
    - Per-day completions for the last 7 days, oldest first
    """
    stats = await get_dashboard_stats(db, user_id, clock=clock)
    return DashboardResponse(stats=stats)
