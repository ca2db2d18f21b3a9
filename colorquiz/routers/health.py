"""Health check routes for the Color Quiz API.

This module provides health check endpoints for monitoring the application
and its dependencies.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from colorquiz.api.dependencies import get_settings
from colorquiz.core.config import Settings
from colorquiz.utils.datetime_utils import utc_now
from colorquiz.utils.logger import get_api_logger

router = APIRouter(prefix="/health", tags=["Health"])
logger = get_api_logger()


class HealthStatus(BaseModel):
    """Health check status response."""
    status: str
    timestamp: datetime
    version: str
    environment: str
    services: Dict[str, Dict[str, Any]]


async def _timed_ping(client: Optional[Any]) -> Dict[str, Any]:
    if client is None:
        return {"status": "unavailable"}

    started = time.perf_counter()
    healthy = await client.ping()
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    return {
        "status": "healthy" if healthy else "unhealthy",
        "response_time_ms": elapsed_ms,
    }


@router.get("/detailed", response_model=HealthStatus)
async def detailed_health_check(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> HealthStatus:
    """Detailed health check including MongoDB and Redis.

    The database is required; Redis only backs the question cache, so its
    absence degrades rather than fails the service.
    """
    mongodb = getattr(request.app.state, "mongodb", None)
    redis_client = getattr(request.app.state, "redis", None)

    services = {
        "database": {"type": "mongodb", **await _timed_ping(mongodb)},
        "cache": {
            "type": "redis",
            "enabled": settings.ENABLE_CACHE,
            **await _timed_ping(redis_client),
        },
    }

    overall_status = "healthy"
    if services["database"]["status"] != "healthy":
        overall_status = "unhealthy"
        logger.error("Database health check failed")
    elif settings.ENABLE_CACHE and services["cache"]["status"] != "healthy":
        overall_status = "degraded"
        logger.warning("Cache health check failed")

    return HealthStatus(
        status=overall_status,
        timestamp=utc_now(),
        version=settings.APP_VERSION,
        environment=settings.APP_ENV,
        services=services,
    )


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    return {"status": "ok"}
