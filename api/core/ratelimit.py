"""Rate limiting configuration using slowapi.

SCALABILITY NOTES:
- Production should use Redis: set RATELIMIT_STORAGE_URI="redis://host:port/db"
- memory:// storage does NOT work with multiple workers/replicas
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from core.config import get_settings
from core.logger import get_logger

logger = get_logger(__name__)

settings = get_settings()

if not settings.debug and settings.ratelimit_storage_uri == "memory://":
    logger.warning(
        "ratelimit.memory_storage",
        hint="Set RATELIMIT_STORAGE_URI to a Redis URL for multi-replica deployments",
    )


def _get_request_identifier(request: Request) -> str:
    """Authenticated user ID if available, otherwise the client address."""
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    return get_remote_address(request)


_using_redis = settings.ratelimit_storage_uri.startswith("redis://")

limiter = Limiter(
    key_func=_get_request_identifier,
    default_limits=["100/minute"],
    storage_uri=settings.ratelimit_storage_uri,
    in_memory_fallback_enabled=_using_redis,
    key_prefix="habits:",
)


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """Custom handler for rate limit exceeded errors."""
    detail = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    logger.warning(
        "ratelimit.exceeded",
        identifier=_get_request_identifier(request),
        limit=detail,
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Rate limit exceeded. Please slow down.",
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


READ_LIMIT = "60/minute"

WRITE_LIMIT = "30/minute"
