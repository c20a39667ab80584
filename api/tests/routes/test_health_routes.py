"""Unit tests for health check routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from routes.health_routes import health, ready


@pytest.mark.unit
class TestHealthEndpoint:
    """Tests for GET /health."""

    async def test_health_returns_200_healthy(self):
        """Health endpoint returns status=healthy."""
        result = await health()
        assert result.status == "healthy"
        assert result.service == "habit-tracker-api"


@pytest.mark.unit
class TestReadyEndpoint:
    """Tests for GET /ready."""

    async def test_ready_returns_200_when_db_reachable(self):
        request = MagicMock()

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
        ) as mock_check:
            result = await ready(request)

        assert result.status == "ready"
        mock_check.assert_awaited_once_with(request.app.state.engine)

    async def test_ready_returns_503_when_db_unreachable(self):
        request = MagicMock()

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
            side_effect=ConnectionError("refused"),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await ready(request)

        assert exc_info.value.status_code == 503


@pytest.mark.integration
class TestHealthOverHttp:
    async def test_health_needs_no_auth(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "habit-tracker-api"}

    async def test_ready_against_test_database(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_responses_carry_request_id(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-Id": "abc-123"})

        assert response.headers["x-request-id"] == "abc-123"
        assert response.headers["x-content-type-options"] == "nosniff"

    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
