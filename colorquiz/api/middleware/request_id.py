"""Request ID middleware for the Color Quiz API.

This middleware assigns every request an id, exposes it through a context
variable for log records and error envelopes, and echoes it in the response.
"""

import contextvars
from typing import Callable, Optional
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from colorquiz.utils.logger import get_api_logger

logger = get_api_logger()

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id",
    default=None
)

UNSAFE_CHARACTERS = ("<", ">", '"', "'", "\n", "\r", "\0")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and propagate request IDs."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Request-ID",
        generate_request_id: Optional[Callable[[], str]] = None
    ):
        """Initialize request ID middleware.

        Args:
            app: The ASGI application
            header_name: Header carrying the request ID
            generate_request_id: Custom request ID factory
        """
        super().__init__(app)
        self.header_name = header_name
        self.generate_request_id = generate_request_id or (lambda: str(uuid4()))

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name)

        if not self._is_valid_request_id(request_id):
            if request_id:
                logger.warning("Invalid request ID in header, generating new one")
            request_id = self.generate_request_id()

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
            response.headers[self.header_name] = request_id
            return response
        finally:
            request_id_var.reset(token)

    def _is_valid_request_id(self, request_id: Optional[str]) -> bool:
        if not request_id:
            return False
        if len(request_id) < 8 or len(request_id) > 128:
            return False
        return not any(char in request_id for char in UNSAFE_CHARACTERS)


def get_request_id(request: Optional[Request] = None) -> Optional[str]:
    """Get the current request ID.

    Args:
        request: Request whose state is checked first

    Returns:
        Optional[str]: Current request ID or None outside a request
    """
    if request is not None:
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            return request_id
    return request_id_var.get()
