"""Tests for core database module."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from core.database import (
    check_db_connection,
    create_engine,
    create_session_maker,
    dispose_engine,
    get_db,
    init_db,
)
from models import Habit

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.mark.unit
class TestCreateEngine:
    """Tests for create_engine function."""

    async def test_in_memory_sqlite_uses_static_pool(self):
        engine = create_engine(MEMORY_URL)
        try:
            assert isinstance(engine.sync_engine.pool, StaticPool)
        finally:
            await engine.dispose()

    async def test_sqlite_enforces_foreign_keys(self):
        engine = create_engine(MEMORY_URL)
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA foreign_keys"))
                assert result.scalar() == 1
        finally:
            await engine.dispose()


@pytest.mark.integration
class TestInitDb:
    """Tests for init_db function."""

    async def test_creates_tables(self):
        engine = create_engine(MEMORY_URL)
        try:
            await init_db(engine)

            async with engine.connect() as conn:
                tables = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
            assert {"habits", "habit_logs"} <= set(tables)
        finally:
            await engine.dispose()

    async def test_is_idempotent(self):
        engine = create_engine(MEMORY_URL)
        try:
            await init_db(engine)
            await init_db(engine)
        finally:
            await engine.dispose()


@pytest.mark.integration
class TestCheckDbConnection:
    async def test_succeeds_against_sqlite(self, test_engine):
        await check_db_connection(test_engine)


@pytest.mark.unit
class TestDisposeEngine:
    async def test_disposes_engine(self):
        engine = MagicMock()
        engine.dispose = AsyncMock()

        await dispose_engine(engine)

        engine.dispose.assert_awaited_once()


@pytest.mark.integration
class TestGetDb:
    """Tests for the request-scoped session dependency."""

    def _request(self, test_engine) -> MagicMock:
        request = MagicMock()
        request.app.state.session_maker = create_session_maker(test_engine)
        return request

    async def test_commits_on_success(self, test_engine):
        gen = get_db(self._request(test_engine))
        session = await anext(gen)
        session.add(Habit(user_id="u1", title="Read"))
        await session.flush()
        with pytest.raises(StopAsyncIteration):
            await anext(gen)

        async with create_session_maker(test_engine)() as check:
            count = await check.scalar(text("SELECT COUNT(*) FROM habits"))
        assert count == 1

    async def test_rolls_back_and_reraises(self, test_engine):
        gen = get_db(self._request(test_engine))
        session = await anext(gen)
        session.add(Habit(user_id="u1", title="Read"))
        await session.flush()
        with pytest.raises(IntegrityError):
            await gen.athrow(IntegrityError("INSERT", {}, Exception("dup")))

        async with create_session_maker(test_engine)() as check:
            count = await check.scalar(text("SELECT COUNT(*) FROM habits"))
        assert count == 0
