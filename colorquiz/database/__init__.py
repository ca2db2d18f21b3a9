"""Persistence layer: store interfaces, MongoDB and Redis clients."""

from colorquiz.database.mongodb import MongoDB
from colorquiz.database.redis_client import RedisClient

__all__ = [
    "MongoDB",
    "RedisClient",
]
