"""Redis client management for Color Quiz.

Redis is only used as a read-through cache for question bank documents.
Cache operations never fail a request: errors are logged and surface as a
cache miss or an unsuccessful write.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from colorquiz.utils.logger import get_cache_logger

logger = get_cache_logger()


class RedisClient:
    """Redis client manager with connection pooling."""

    def __init__(self, url: str, **kwargs: Any):
        """Configure a client without connecting.

        Args:
            url: Redis connection URL
            **kwargs: Pool options (max_connections, password,
                health_check_interval)
        """
        self.url = url
        self.pool_kwargs: Dict[str, Any] = {
            "max_connections": kwargs.get("max_connections", 50),
            "decode_responses": True,
            "encoding": "utf-8",
            "health_check_interval": kwargs.get("health_check_interval", 30),
            "socket_keepalive": True,
            "socket_connect_timeout": kwargs.get("socket_connect_timeout", 5),
            "retry_on_timeout": True,
            "retry_on_error": [RedisConnectionError, RedisTimeoutError],
        }
        if kwargs.get("password"):
            self.pool_kwargs["password"] = kwargs["password"]

        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Any) -> "RedisClient":
        return cls(
            url=settings.get_redis_url(),
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            password=settings.REDIS_PASSWORD,
            health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the pool and verify the server is reachable."""
        async with self._lock:
            if self._client is not None:
                logger.warning("Redis already connected")
                return

            pool = ConnectionPool.from_url(self.url, **self.pool_kwargs)
            client = redis.Redis(connection_pool=pool)
            try:
                await client.ping()
            except RedisError as e:
                await pool.disconnect()
                logger.error(f"Redis connection failed: {str(e)}", exc_info=True)
                raise

            self._pool = pool
            self._client = client
            logger.info(
                "Redis connected successfully",
                extra={"max_connections": self.pool_kwargs["max_connections"]}
            )

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                if self._pool is not None:
                    await self._pool.disconnect()
                self._client = None
                self._pool = None
                logger.info("Redis disconnected successfully")

    async def ping(self) -> bool:
        """Check if the Redis connection is alive.

        Returns:
            bool: True if the server answered
        """
        if self._client is None:
            return False

        try:
            return await self._client.ping() is True
        except RedisError as e:
            logger.error(f"Redis ping failed: {str(e)}")
            return False

    async def get_json(self, key: str) -> Optional[Any]:
        """Get and deserialize a JSON value.

        Args:
            key: Cache key

        Returns:
            Deserialized value or None
        """
        values = await self.mget_json([key])
        return values[0]

    async def mget_json(self, keys: Sequence[str]) -> List[Optional[Any]]:
        """Get and deserialize several JSON values in one round trip.

        Args:
            keys: Cache keys

        Returns:
            List[Optional[Any]]: One entry per key, None on a miss
        """
        if self._client is None or not keys:
            return [None] * len(keys)

        try:
            raw_values = await self._client.mget(list(keys))
        except RedisError as e:
            logger.error(f"Redis MGET error: {str(e)}", extra={"key_count": len(keys)})
            return [None] * len(keys)

        values: List[Optional[Any]] = []
        for key, raw in zip(keys, raw_values):
            if raw is None:
                values.append(None)
                continue
            try:
                values.append(json.loads(raw))
            except json.JSONDecodeError as e:
                logger.error(f"JSON decode error for key {key}: {str(e)}")
                values.append(None)
        return values

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await self.set_many_json({key: value}, ttl)

    async def set_many_json(self, items: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """Serialize and store several values in one pipeline.

        Args:
            items: Values keyed by cache key
            ttl: Time to live in seconds

        Returns:
            bool: Success status
        """
        if self._client is None or not items:
            return False

        try:
            async with self._client.pipeline(transaction=False) as pipe:
                for key, value in items.items():
                    pipe.set(key, json.dumps(value, default=str), ex=ttl)
                await pipe.execute()
            return True
        except RedisError as e:
            logger.error(f"Redis pipeline SET error: {str(e)}", extra={"key_count": len(items)})
            return False

    async def delete(self, *keys: str) -> int:
        """Delete keys.

        Args:
            *keys: Cache keys

        Returns:
            int: Number of keys removed
        """
        if self._client is None or not keys:
            return 0

        try:
            return await self._client.delete(*keys)
        except RedisError as e:
            logger.error(f"Redis DELETE error: {str(e)}")
            return 0
