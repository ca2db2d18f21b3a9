"""Application lifecycle event handlers for Color Quiz.

Startup creates the MongoDB and Redis clients and stores them on
``app.state``; request dependencies read them from there. Shutdown closes
whatever startup opened.
"""

from typing import Callable, List, Optional, Tuple

from fastapi import FastAPI

from colorquiz.core.config import Settings, get_settings
from colorquiz.database.mongodb import MongoDB
from colorquiz.database.redis_client import RedisClient
from colorquiz.utils.logger import get_logger

logger = get_logger(__name__)

CRITICAL_TASKS = ("Database Connection", "Database Indexes")


class StartupEvent:
    """Handles application startup tasks."""

    def __init__(self, app: FastAPI, settings: Optional[Settings] = None):
        """Initialize startup event handler.

        Args:
            app: FastAPI application instance
            settings: Application settings, defaults to the cached settings
        """
        self.app = app
        self.settings = settings or get_settings()
        self.tasks: List[str] = []
        self.failed_tasks: List[Tuple[str, str]] = []

    async def execute(self) -> None:
        """Execute all startup tasks.

        Raises:
            RuntimeError: If a critical task fails
        """
        logger.info(
            "Starting application startup sequence",
            extra={
                "app_name": self.settings.APP_NAME,
                "version": self.settings.APP_VERSION,
                "environment": self.settings.APP_ENV,
            }
        )

        startup_tasks = [
            ("Database Connection", self._connect_database),
            ("Database Indexes", self._create_indexes),
            ("Redis Connection", self._connect_redis),
        ]

        for task_name, task_func in startup_tasks:
            try:
                logger.info(f"Starting: {task_name}")
                await task_func()
                self.tasks.append(task_name)
                logger.info(f"Completed: {task_name}")
            except Exception as e:
                logger.error(
                    f"Failed: {task_name}",
                    extra={"error": str(e)},
                    exc_info=True
                )
                self.failed_tasks.append((task_name, str(e)))

                if task_name in CRITICAL_TASKS:
                    raise RuntimeError(
                        f"Critical startup task failed: {task_name}. Error: {str(e)}"
                    ) from e

        self._log_startup_summary()

    async def _connect_database(self) -> None:
        mongodb = MongoDB.from_settings(self.settings)
        await mongodb.connect()
        self.app.state.mongodb = mongodb

    async def _create_indexes(self) -> None:
        created = await self.app.state.mongodb.create_indexes()
        logger.info(f"Ensured {created} database indexes")

    async def _connect_redis(self) -> None:
        """Connect the question cache. Failure leaves caching off."""
        self.app.state.redis = None
        if not self.settings.ENABLE_CACHE:
            logger.info("Redis connection skipped (caching disabled)")
            return

        redis_client = RedisClient.from_settings(self.settings)
        await redis_client.connect()
        self.app.state.redis = redis_client

    def _log_startup_summary(self) -> None:
        summary = {
            "successful_tasks": len(self.tasks),
            "failed_tasks": len(self.failed_tasks),
            "tasks": self.tasks,
            "failures": self.failed_tasks,
            "environment": self.settings.APP_ENV,
            "debug_mode": self.settings.APP_DEBUG,
            "api_docs": self.settings.ENABLE_API_DOCS,
            "cache_enabled": self.app.state.redis is not None,
        }

        if self.failed_tasks:
            logger.warning("Application started with errors", extra=summary)
        else:
            logger.info("Application started successfully", extra=summary)


class ShutdownEvent:
    """Handles application shutdown tasks."""

    def __init__(self, app: FastAPI):
        self.app = app

    async def execute(self) -> None:
        """Execute all shutdown tasks."""
        logger.info("Starting application shutdown sequence")

        shutdown_tasks = [
            ("Close Redis Connection", self._close_redis),
            ("Close Database Connection", self._close_database),
        ]

        for task_name, task_func in shutdown_tasks:
            try:
                logger.info(f"Executing: {task_name}")
                await task_func()
                logger.info(f"Completed: {task_name}")
            except Exception as e:
                logger.error(
                    f"Error during {task_name}: {str(e)}",
                    exc_info=True
                )

        logger.info("Application shutdown complete")

    async def _close_redis(self) -> None:
        redis_client = getattr(self.app.state, "redis", None)
        if redis_client is not None:
            await redis_client.disconnect()
            self.app.state.redis = None

    async def _close_database(self) -> None:
        mongodb = getattr(self.app.state, "mongodb", None)
        if mongodb is not None:
            await mongodb.disconnect()
            self.app.state.mongodb = None


def create_start_app_handler(app: FastAPI, settings: Optional[Settings] = None) -> Callable:
    """Create startup event handler for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        Startup event handler function
    """
    async def start_app() -> None:
        await StartupEvent(app, settings).execute()

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler for the application.

    Args:
        app: FastAPI application instance

    Returns:
        Shutdown event handler function
    """
    async def stop_app() -> None:
        await ShutdownEvent(app).execute()

    return stop_app
