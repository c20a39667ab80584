"""Pytest configuration and shared fixtures.

This module provides:
- In-memory SQLite database (aiosqlite) created fresh for every test
- Async session fixture for repository/service tests
- FastAPI test client for route integration tests
- Auth bypass and a pinned clock for routes
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("REQUIRE_HTTPS", "false")
os.environ.setdefault("SESSION_SECRET_KEY", "test_session_secret_key_for_testing")
os.environ.setdefault("RATELIMIT_STORAGE_URI", "memory://")

from collections.abc import AsyncGenerator, Generator
from datetime import datetime

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from core.config import clear_settings_cache
from core.database import create_engine, create_session_maker, init_db
from services.dates_service import FixedClock
from tests.factories import TEST_NOW, TEST_USER_ID

# =============================================================================
# Test Settings
# =============================================================================

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with all tables, one per test."""
    engine = create_engine(TEST_DATABASE_URL)
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(
    test_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Session for setting up data and calling repositories/services directly.

    Route tests must commit what they seed so the request's own session
    sees it.
    """
    session_maker = create_session_maker(test_engine)
    async with session_maker() as session:
        yield session


# =============================================================================
# Clock Fixtures
# =============================================================================


@pytest.fixture
def test_now() -> datetime:
    return TEST_NOW


@pytest.fixture
def fixed_clock(test_now: datetime) -> FixedClock:
    return FixedClock(test_now)


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def test_user_id() -> str:
    return TEST_USER_ID


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def app(
    test_engine: AsyncEngine,
    fixed_clock: FixedClock,
) -> AsyncGenerator[FastAPI]:
    """FastAPI app wired to the test database and the pinned clock.

    Lifespan does not run under ASGITransport, so app.state is set here.
    """
    # Import here so env vars above are in place before Settings is built
    from core.clock import get_clock
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = create_session_maker(test_engine)
    fastapi_app.dependency_overrides[get_clock] = lambda: fixed_clock

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client without a session (unauthenticated)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def authenticated_client(
    app: FastAPI,
    test_user_id: str,
) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client whose requests resolve to test_user_id."""
    from core.auth import require_auth

    async def _override_require_auth() -> str:
        return test_user_id

    app.dependency_overrides[require_auth] = _override_require_auth
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio (required by httpx)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
