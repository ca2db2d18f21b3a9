"""Unit tests for the Redis client wrapper."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from colorquiz.database.redis_client import RedisClient


@pytest.fixture
def raw_client():
    return MagicMock()


@pytest.fixture
def client(raw_client):
    redis_client = RedisClient("redis://localhost:6379/0")
    redis_client._client = raw_client
    return redis_client


class TestRedisClientReads:

    @pytest.mark.asyncio
    async def test_not_connected_is_all_misses(self):
        redis_client = RedisClient("redis://localhost:6379/0")

        assert await redis_client.mget_json(["a", "b"]) == [None, None]
        assert await redis_client.ping() is False

    @pytest.mark.asyncio
    async def test_mget_decodes_json(self, client, raw_client):
        raw_client.mget = AsyncMock(return_value=[json.dumps({"x": 1}), None])

        assert await client.mget_json(["a", "b"]) == [{"x": 1}, None]

    @pytest.mark.asyncio
    async def test_corrupt_value_is_a_miss(self, client, raw_client):
        raw_client.mget = AsyncMock(return_value=["{not json"])

        assert await client.get_json("a") is None

    @pytest.mark.asyncio
    async def test_redis_error_is_a_miss(self, client, raw_client):
        raw_client.mget = AsyncMock(side_effect=RedisConnectionError("down"))

        assert await client.mget_json(["a"]) == [None]


class TestRedisClientWrites:

    @pytest.mark.asyncio
    async def test_set_many_uses_pipeline(self, client, raw_client):
        pipe = MagicMock()
        pipe.execute = AsyncMock()
        raw_client.pipeline.return_value.__aenter__.return_value = pipe

        assert await client.set_many_json({"a": [1], "b": {"k": "v"}}, ttl=30) is True

        pipe.set.assert_any_call("a", "[1]", ex=30)
        pipe.set.assert_any_call("b", '{"k": "v"}', ex=30)
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_pipeline_error_reports_failure(self, client, raw_client):
        pipe = MagicMock()
        pipe.execute = AsyncMock(side_effect=RedisConnectionError("down"))
        raw_client.pipeline.return_value.__aenter__.return_value = pipe

        assert await client.set_json("a", 1) is False

    @pytest.mark.asyncio
    async def test_delete_error_removes_nothing(self, client, raw_client):
        raw_client.delete = AsyncMock(side_effect=RedisConnectionError("down"))

        assert await client.delete("a") == 0
