"""Integration tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from colorquiz.api.dependencies import get_settings
from colorquiz.core.config import Settings


def pinging(result: bool) -> MagicMock:
    client = MagicMock()
    client.ping = AsyncMock(return_value=result)
    return client


@pytest.fixture
def app_state(api_app):
    yield api_app.state
    api_app.state.mongodb = None
    api_app.state.redis = None


@pytest.fixture
def cache_enabled(api_app):
    api_app.dependency_overrides[get_settings] = lambda: Settings(
        APP_ENV="test", ENABLE_CACHE=True, _env_file=None
    )


class TestHealthEndpoints:

    @pytest.mark.asyncio
    async def test_basic_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["environment"] == "test"

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/api/v1/health/live")

        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_detailed_healthy(self, client, app_state):
        app_state.mongodb = pinging(True)

        response = await client.get("/api/v1/health/detailed")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["database"]["status"] == "healthy"
        assert data["services"]["cache"]["status"] == "unavailable"

    @pytest.mark.asyncio
    async def test_database_down_is_unhealthy(self, client, app_state):
        app_state.mongodb = pinging(False)

        response = await client.get("/api/v1/health/detailed")

        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_enabled_cache_down_is_degraded(self, client, app_state, cache_enabled):
        app_state.mongodb = pinging(True)
        app_state.redis = None

        response = await client.get("/api/v1/health/detailed")

        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["cache"]["enabled"] is True


@pytest.mark.asyncio
async def test_store_routes_need_a_database(api_app, client):
    api_app.dependency_overrides.clear()

    response = await client.post("/api/v1/attempts")

    assert response.status_code == 503
    assert response.json()["error"]["message"] == "Database connection unavailable"
