"""Main FastAPI application module for Color Quiz.

This module creates and configures the FastAPI application instance with all
necessary middleware, routers, and event handlers.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from colorquiz.api.middleware.error_handler import register_exception_handlers
from colorquiz.api.middleware.logging_middleware import LoggingMiddleware
from colorquiz.api.middleware.request_id import RequestIDMiddleware
from colorquiz.core.config import Settings, get_settings
from colorquiz.core.events import create_start_app_handler, create_stop_app_handler
from colorquiz.utils.logger import get_logger

logger = get_logger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, defaults to the cached settings

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting Color Quiz API",
            extra={
                "app_name": settings.APP_NAME,
                "version": settings.APP_VERSION,
                "environment": settings.APP_ENV,
            }
        )
        await create_start_app_handler(app, settings)()

        yield

        logger.info("Shutting down Color Quiz API")
        await create_stop_app_handler(app)()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Color personality quiz: attempts, ranking sessions and category scoring",
        version=settings.APP_VERSION,
        docs_url=f"{settings.API_V1_PREFIX}/docs" if settings.ENABLE_API_DOCS else None,
        redoc_url=f"{settings.API_V1_PREFIX}/redoc" if settings.ENABLE_API_DOCS else None,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json" if settings.ENABLE_API_DOCS else None,
        lifespan=lifespan,
    )
    app.state.mongodb = None
    app.state.redis = None

    register_exception_handlers(app, production=settings.is_production())
    register_middleware(app, settings)
    register_routers(app, settings)
    register_health_checks(app, settings)

    if settings.ENABLE_METRICS:
        setup_metrics(app)

    return app


def register_middleware(app: FastAPI, settings: Settings) -> FastAPI:
    """Register application middleware.

    Middleware added last runs first, so request IDs are assigned before
    anything logs.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        FastAPI: Application with middleware registered
    """
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=1024)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time to response headers."""
        start_time = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.3f}"
        return response

    return app


def register_routers(app: FastAPI, settings: Settings) -> FastAPI:
    # Imported here so routers load after settings and logging are configured
    from colorquiz.routers import attempts, health, sessions

    api_prefix = settings.API_V1_PREFIX
    app.include_router(health.router, prefix=api_prefix)
    app.include_router(attempts.router, prefix=api_prefix)
    app.include_router(sessions.router, prefix=api_prefix)
    return app


def register_health_checks(app: FastAPI, settings: Settings) -> FastAPI:
    """Register root-level health check endpoints.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        FastAPI: Application with health checks registered
    """

    @app.get(
        "/health",
        tags=["Health"],
        summary="Basic health check",
        response_model=Dict[str, Any],
    )
    async def health_check() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="Root endpoint",
        response_model=Dict[str, str],
    )
    async def root() -> Dict[str, str]:
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
            "health": "/health",
        }

    return app


def setup_metrics(app: FastAPI) -> None:
    """Setup Prometheus metrics.

    Args:
        app: FastAPI application instance
    """
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[".*health.*", "/metrics"],
        inprogress_name="colorquiz_inprogress",
        inprogress_labels=True,
    )

    instrumentator.instrument(app).expose(
        app,
        endpoint="/metrics",
        tags=["Metrics"],
        include_in_schema=False,
    )

    logger.info("Prometheus metrics enabled at /metrics")


app = create_application()

__all__ = ["app", "create_application"]


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "colorquiz.api.main:app",
        host=_settings.APP_HOST,
        port=_settings.APP_PORT,
        reload=_settings.is_development(),
        log_config=None,
        access_log=False,
    )
