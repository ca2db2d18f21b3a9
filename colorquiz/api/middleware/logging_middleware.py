"""Logging middleware for the Color Quiz API."""

import time
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from colorquiz.utils.logger import get_api_logger, log_api_request, log_api_response

logger = get_api_logger()

RESOURCE_COLLECTIONS = ("attempts", "sessions")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests and responses."""

    def __init__(
        self,
        app: ASGIApp,
        exclude_paths: Optional[List[str]] = None,
        slow_request_ms: float = 1000.0,
    ):
        """Initialize logging middleware.

        Args:
            app: The ASGI application
            exclude_paths: Path prefixes that are not logged
            slow_request_ms: Duration above which a request is logged as slow
        """
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/metrics", "/docs", "/openapi.json"]
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if any(path.startswith(prefix) for prefix in self.exclude_paths):
            return await call_next(request)

        start_time = time.perf_counter()
        log_api_request(
            request.method,
            path,
            resource_id=self._resource_id(path),
            logger=logger,
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_api_response(request.method, path, response.status_code, duration_ms, logger=logger)

        if duration_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request: {request.method} {path}",
                extra=self._request_context(request, duration_ms)
            )

        return response

    def _resource_id(self, path: str) -> Optional[str]:
        """Attempt or session id from paths such as '/attempts/{id}/answers'."""
        segments = [segment for segment in path.split("/") if segment]
        for index, segment in enumerate(segments[:-1]):
            if segment in RESOURCE_COLLECTIONS:
                return segments[index + 1]
        return None

    def _request_context(self, request: Request, duration_ms: float) -> Dict[str, object]:
        return {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_host": request.client.host if request.client else None,
            "duration_ms": round(duration_ms, 2),
        }
