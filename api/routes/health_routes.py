"""Health check endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection
from core.logger import get_logger
from schemas import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

SERVICE_NAME = "habit-tracker-api"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": "Service unavailable - DB unreachable"}},
)
async def ready(request: Request) -> HealthResponse:
    """Readiness endpoint: 200 only when the database answers."""
    try:
        await check_db_connection(request.app.state.engine)
    except Exception:
        logger.warning("readiness.db.unreachable", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        )
    return HealthResponse(status="ready", service=SERVICE_NAME)
