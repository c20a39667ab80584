"""FastAPI application for the Habit Tracker API."""

import asyncio
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging, get_logger
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from routes import dashboard_router, habits_router, health_router

configure_logging()
logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "An unexpected error occurred. Please try again.",
        },
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render HTTPExceptions in the API's ``{success, message}`` envelope."""
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _error_field(loc: tuple | list) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts on every location
    parts = list(loc)
    if parts and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(str(p) for p in parts) or "body"


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors."""
    if not isinstance(exc, RequestValidationError):
        return await global_exception_handler(request, exc)

    errors = [
        {"field": _error_field(err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
    )
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": errors,
        },
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine and tables at startup, dispose on shutdown."""
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)
        logger.info("init.complete")
    except TimeoutError:
        logger.error(
            "init.timeout",
            hint="Startup hung, check DATABASE_URL and DB connectivity",
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()
_docs_enabled = _settings.enable_docs or _settings.debug

app = fastapi.FastAPI(
    title="Habit Tracker API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    openapi_url="/openapi.json" if _docs_enabled else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.session_secret_key,
    session_cookie="session",
    max_age=60 * 60 * 24 * 30,
    same_site="lax",
    https_only=_settings.require_https,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
    expose_headers=["X-Request-Id"],
    max_age=600,
)
# Outermost, so every log line of the request carries its request_id
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(dashboard_router)
app.include_router(habits_router)
