"""Unit tests for core.auth session-based user resolution."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException, Request

from core.auth import get_user_id_from_request, require_auth


def _make_request(session: dict) -> Request:
    request = MagicMock(spec=Request)
    request.session = session
    request.state = MagicMock()
    return request


@pytest.mark.unit
class TestGetUserIdFromRequest:
    def test_reads_session_user_id(self):
        assert get_user_id_from_request(_make_request({"user_id": "u1"})) == "u1"

    def test_missing_returns_none(self):
        assert get_user_id_from_request(_make_request({})) is None

    def test_empty_string_returns_none(self):
        assert get_user_id_from_request(_make_request({"user_id": ""})) is None

    def test_numeric_id_stringified(self):
        assert get_user_id_from_request(_make_request({"user_id": 7})) == "7"


@pytest.mark.unit
class TestRequireAuth:
    async def test_returns_user_id_and_sets_state(self):
        request = _make_request({"user_id": "u1"})

        assert await require_auth(request) == "u1"
        assert request.state.user_id == "u1"

    async def test_raises_401_without_session(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_auth(_make_request({}))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Unauthorized"
