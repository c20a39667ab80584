"""Habit endpoints: management, daily tracking, and per-habit progress."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette import status

from core.auth import UserId
from core.clock import RequestClock
from core.database import DbSession
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import (
    CompletionResponse,
    HabitCreateRequest,
    HabitListResponse,
    HabitLogListResponse,
    HabitProgressResponse,
    HabitResponse,
    HabitUpdateRequest,
    MessageResponse,
)
from services.habits_service import (
    HabitAlreadyCompletedError,
    HabitNotFoundError,
    complete_habit,
    create_habit,
    delete_habit,
    get_habit,
    get_habit_logs,
    get_habit_progress,
    list_habits,
    update_habit,
)

router = APIRouter(prefix="/api/habits", tags=["habits"])

HABIT_NOT_FOUND = "Habit not found."


@router.get("", response_model=HabitListResponse)
@limiter.limit(READ_LIMIT)
async def list_habits_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
) -> HabitListResponse:
    """Active habits, newest first, with today's completion flag."""
    habits = await list_habits(db, user_id, clock=clock)
    return HabitListResponse(count=len(habits), habits=habits)


@router.post("", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
async def create_habit_endpoint(
    request: Request,
    body: HabitCreateRequest,
    user_id: UserId,
    db: DbSession,
) -> HabitResponse:
    habit = await create_habit(db, user_id, body.title, body.description)
    return HabitResponse(habit=habit)


@router.get("/{habit_id}", response_model=HabitResponse)
@limiter.limit(READ_LIMIT)
async def get_habit_endpoint(
    request: Request,
    habit_id: int,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
) -> HabitResponse:
    try:
        habit = await get_habit(db, user_id, habit_id, clock=clock)
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    return HabitResponse(habit=habit)


@router.put("/{habit_id}", response_model=HabitResponse)
@limiter.limit(WRITE_LIMIT)
async def update_habit_endpoint(
    request: Request,
    habit_id: int,
    body: HabitUpdateRequest,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
) -> HabitResponse:
    try:
        habit = await update_habit(
            db,
            user_id,
            habit_id,
            title=body.title,
            description=body.description,
            clock=clock,
        )
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    return HabitResponse(habit=habit)


@router.delete("/{habit_id}", response_model=MessageResponse)
@limiter.limit(WRITE_LIMIT)
async def delete_habit_endpoint(
    request: Request,
    habit_id: int,
    user_id: UserId,
    db: DbSession,
) -> MessageResponse:
    """Soft delete: the habit disappears from lists, its history is kept."""
    try:
        await delete_habit(db, user_id, habit_id)
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    return MessageResponse(message="Habit deleted successfully.")


@router.post(
    "/{habit_id}/complete",
    response_model=CompletionResponse,
    responses={409: {"description": "Habit already completed for today"}},
)
@limiter.limit(WRITE_LIMIT)
async def complete_habit_endpoint(
    request: Request,
    habit_id: int,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
):
    """Mark a habit as completed for today (UTC)."""
    try:
        log = await complete_habit(db, user_id, habit_id, clock=clock)
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    except HabitAlreadyCompletedError as e:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "success": False,
                "message": "Habit already completed for today.",
                "completedAt": (
                    e.completed_at.isoformat() if e.completed_at is not None else None
                ),
            },
        )
    return CompletionResponse(message="Habit marked as completed for today!", log=log)


@router.get("/{habit_id}/logs", response_model=HabitLogListResponse)
@limiter.limit(READ_LIMIT)
async def get_habit_logs_endpoint(
    request: Request,
    habit_id: int,
    user_id: UserId,
    db: DbSession,
) -> HabitLogListResponse:
    try:
        logs = await get_habit_logs(db, user_id, habit_id)
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    return HabitLogListResponse(count=len(logs), logs=logs)


@router.get("/{habit_id}/progress", response_model=HabitProgressResponse)
@limiter.limit(READ_LIMIT)
async def get_habit_progress_endpoint(
    request: Request,
    habit_id: int,
    user_id: UserId,
    db: DbSession,
    clock: RequestClock,
) -> HabitProgressResponse:
    """Chart-ready progress: streak, completion rate, last 7 days, history."""
    try:
        result = await get_habit_progress(db, user_id, habit_id, clock=clock)
    except HabitNotFoundError:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND) from None
    return HabitProgressResponse(habit=result.habit, progress=result.progress)
