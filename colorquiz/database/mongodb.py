"""MongoDB connection management for Color Quiz.

A ``MongoDB`` instance owns one Motor client and its connection pool. The
application creates it during startup, stores it on ``app.state`` and closes it
on shutdown; stores receive it through dependency injection.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import errors

from colorquiz.models.answer import Answer
from colorquiz.models.attempt import OptionOrder
from colorquiz.models.question import Option, Question
from colorquiz.models.ranking import QuestionRanking
from colorquiz.utils.constants import Collections
from colorquiz.utils.logger import get_database_logger

logger = get_database_logger()

# (collection, [(keys, options), ...]) created at startup
INDEX_SPECS: List[Tuple[str, List[Tuple[List[Tuple[str, int]], Dict[str, Any]]]]] = [
    (Collections.QUESTIONS, Question.create_index_keys()),
    (Collections.QUESTION_OPTIONS, Option.create_index_keys()),
    (Collections.ATTEMPT_ANSWERS, Answer.create_index_keys()),
    (Collections.OPTION_ORDERS, OptionOrder.create_index_keys()),
    (Collections.SESSION_RANKINGS, QuestionRanking.create_index_keys()),
]


class MongoDB:
    """MongoDB connection manager."""

    def __init__(
        self,
        url: str,
        db_name: str,
        **kwargs: Any,
    ):
        """Configure a connection manager without connecting.

        Args:
            url: MongoDB connection URL
            db_name: Database name
            **kwargs: Pool options (max_pool_size, min_pool_size,
                max_idle_time_ms, connect_timeout_ms,
                server_selection_timeout_ms)
        """
        self.url = url
        self.db_name = db_name
        self.connection_params = {
            "maxPoolSize": kwargs.get("max_pool_size", 50),
            "minPoolSize": kwargs.get("min_pool_size", 5),
            "maxIdleTimeMS": kwargs.get("max_idle_time_ms", 10000),
            "connectTimeoutMS": kwargs.get("connect_timeout_ms", 10000),
            "serverSelectionTimeoutMS": kwargs.get("server_selection_timeout_ms", 5000),
            "retryWrites": kwargs.get("retry_writes", True),
            "retryReads": kwargs.get("retry_reads", True),
            "w": kwargs.get("write_concern", "majority"),
        }
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Any) -> "MongoDB":
        """Build a connection manager from application settings.

        Args:
            settings: Application settings

        Returns:
            MongoDB: Unconnected manager
        """
        return cls(
            url=settings.get_database_url(),
            db_name=settings.get_database_name(),
            max_pool_size=settings.MONGODB_MAX_POOL_SIZE,
            min_pool_size=settings.MONGODB_MIN_POOL_SIZE,
            max_idle_time_ms=settings.MONGODB_MAX_IDLE_TIME_MS,
            connect_timeout_ms=settings.MONGODB_CONNECT_TIMEOUT_MS,
            server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        )

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """The connected database.

        Raises:
            RuntimeError: If ``connect`` has not completed
        """
        if self._database is None:
            raise RuntimeError("MongoDB is not connected")
        return self._database

    async def connect(self) -> None:
        """Open the client and verify the server is reachable."""
        async with self._lock:
            if self._database is not None:
                logger.warning("MongoDB already connected")
                return

            client = AsyncIOMotorClient(self.url, **self.connection_params)
            try:
                await client.admin.command("ping")
            except errors.PyMongoError as e:
                client.close()
                logger.error(f"MongoDB connection failed: {str(e)}", exc_info=True)
                raise

            self._client = client
            self._database = client[self.db_name]
            logger.info(
                "MongoDB connected successfully",
                extra={
                    "database": self.db_name,
                    "pool_size": self.connection_params["maxPoolSize"],
                }
            )

    async def disconnect(self) -> None:
        """Close the client and release the pool."""
        async with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
                self._database = None
                logger.info("MongoDB disconnected successfully")

    async def ping(self) -> bool:
        """Check if the MongoDB connection is alive.

        Returns:
            bool: True if the server answered
        """
        if self._client is None:
            return False

        try:
            await self._client.admin.command("ping")
            return True
        except errors.PyMongoError as e:
            logger.error(f"MongoDB ping failed: {str(e)}")
            return False

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        return self.database[name]

    async def create_indexes(self) -> int:
        """Create every index the stores rely on.

        A failure on a plain index is logged and skipped; a failure on a
        unique index is re-raised.

        Returns:
            int: Number of indexes created or confirmed

        Raises:
            OperationFailure: If a unique index cannot be built
        """
        created_count = 0
        for collection_name, specs in INDEX_SPECS:
            collection = self.get_collection(collection_name)
            for keys, options in specs:
                try:
                    index_name = await collection.create_index(keys, **options)
                except errors.OperationFailure as e:
                    logger.error(
                        f"Failed to create index on {collection_name}: {str(e)}",
                        extra={"keys": keys, "options": options}
                    )
                    # Unique indexes back the exactly-once upserts
                    if options.get("unique"):
                        raise
                    continue
                created_count += 1
                logger.debug(f"Created index {index_name} on {collection_name}")

        logger.info(f"Created {created_count} database indexes")
        return created_count
