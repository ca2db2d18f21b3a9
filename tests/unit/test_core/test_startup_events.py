"""Unit tests for application startup and shutdown events."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError
from redis.exceptions import ConnectionError as RedisConnectionError

from colorquiz.core.config import Settings
from colorquiz.core.events import ShutdownEvent, StartupEvent


def make_app():
    return SimpleNamespace(state=SimpleNamespace(mongodb=None, redis=None))


def fake_mongodb():
    mongodb = MagicMock()
    mongodb.connect = AsyncMock()
    mongodb.disconnect = AsyncMock()
    mongodb.create_indexes = AsyncMock(return_value=7)
    return mongodb


def fake_redis(connect_error=None):
    redis_client = MagicMock()
    redis_client.connect = AsyncMock(side_effect=connect_error)
    redis_client.disconnect = AsyncMock()
    return redis_client


@pytest.fixture
def settings():
    return Settings(APP_ENV="test", ENABLE_CACHE=True, _env_file=None)


class TestStartupEvent:

    @pytest.mark.asyncio
    async def test_connects_everything(self, settings):
        app = make_app()
        mongodb, redis_client = fake_mongodb(), fake_redis()

        with patch("colorquiz.core.events.MongoDB.from_settings", return_value=mongodb), \
                patch("colorquiz.core.events.RedisClient.from_settings", return_value=redis_client):
            event = StartupEvent(app, settings)
            await event.execute()

        assert app.state.mongodb is mongodb
        assert app.state.redis is redis_client
        mongodb.create_indexes.assert_awaited_once()
        assert event.failed_tasks == []

    @pytest.mark.asyncio
    async def test_database_failure_is_fatal(self, settings):
        app = make_app()
        mongodb = fake_mongodb()
        mongodb.connect.side_effect = ServerSelectionTimeoutError("no servers")

        with patch("colorquiz.core.events.MongoDB.from_settings", return_value=mongodb):
            with pytest.raises(RuntimeError, match="Database Connection"):
                await StartupEvent(app, settings).execute()

        assert app.state.mongodb is None

    @pytest.mark.asyncio
    async def test_index_failure_is_fatal(self, settings):
        app = make_app()
        mongodb = fake_mongodb()
        mongodb.create_indexes.side_effect = OperationFailure("existing duplicates")

        with patch("colorquiz.core.events.MongoDB.from_settings", return_value=mongodb), \
                patch("colorquiz.core.events.RedisClient.from_settings") as redis_factory:
            with pytest.raises(RuntimeError, match="Database Indexes"):
                await StartupEvent(app, settings).execute()

        redis_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_redis_failure_degrades(self, settings):
        app = make_app()

        with patch("colorquiz.core.events.MongoDB.from_settings", return_value=fake_mongodb()), \
                patch("colorquiz.core.events.RedisClient.from_settings",
                      return_value=fake_redis(RedisConnectionError("refused"))):
            event = StartupEvent(app, settings)
            await event.execute()

        assert app.state.redis is None
        assert [name for name, _ in event.failed_tasks] == ["Redis Connection"]

    @pytest.mark.asyncio
    async def test_cache_disabled_skips_redis(self):
        app = make_app()
        settings = Settings(APP_ENV="test", ENABLE_CACHE=False, _env_file=None)

        with patch("colorquiz.core.events.MongoDB.from_settings", return_value=fake_mongodb()), \
                patch("colorquiz.core.events.RedisClient.from_settings") as redis_factory:
            await StartupEvent(app, settings).execute()

        redis_factory.assert_not_called()
        assert app.state.redis is None


class TestShutdownEvent:

    @pytest.mark.asyncio
    async def test_closes_connections(self):
        app = make_app()
        mongodb, redis_client = fake_mongodb(), fake_redis()
        app.state.mongodb, app.state.redis = mongodb, redis_client

        await ShutdownEvent(app).execute()

        mongodb.disconnect.assert_awaited_once()
        redis_client.disconnect.assert_awaited_once()
        assert app.state.mongodb is None
        assert app.state.redis is None

    @pytest.mark.asyncio
    async def test_nothing_to_close(self):
        app = make_app()

        await ShutdownEvent(app).execute()

        assert app.state.mongodb is None
