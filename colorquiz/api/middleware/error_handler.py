"""Exception handlers for the Color Quiz API.

Every error leaves the API in the same envelope:
``{"error": {"code", "message", "request_id", "details"?}}``.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from colorquiz.api.middleware.request_id import get_request_id
from colorquiz.schemas.base import ErrorResponse
from colorquiz.utils.exceptions import (
    AllocationError,
    ColorQuizError,
    DataIntegrityError,
    IncompleteError,
    NoQuestionsError,
    ResourceNotFoundError,
    StoreFailure,
    ValidationError,
    handle_exception_chain,
)
from colorquiz.utils.logger import get_api_logger

logger = get_api_logger()

# Checked in order; subclasses first
STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (IncompleteError, status.HTTP_409_CONFLICT),
    (NoQuestionsError, status.HTTP_400_BAD_REQUEST),
    (DataIntegrityError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (AllocationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StoreFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

STORE_FAILURE_MESSAGE = "Storage operation failed"


def status_for(error: ColorQuizError) -> int:
    """HTTP status code for an application error."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int,
    code: Any,
    message: str,
    request_id: Optional[str],
    details: Optional[Dict[str, Any]] = None,
    validation_errors: Optional[list] = None,
) -> JSONResponse:
    body = ErrorResponse.create(
        code=code,
        message=message,
        request_id=request_id,
        details=details,
        validation_errors=validation_errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
    )


def register_exception_handlers(app: FastAPI, production: bool = False) -> FastAPI:
    """Register custom exception handlers.

    Args:
        app: FastAPI application instance
        production: Hide the text of unexpected errors

    Returns:
        FastAPI: Application with exception handlers registered
    """

    @app.exception_handler(ColorQuizError)
    async def application_exception_handler(request: Request, exc: ColorQuizError) -> JSONResponse:
        request_id = get_request_id(request)
        status_code = status_for(exc)

        log_extra = {
            "request_id": request_id,
            "error_code": exc.error_code,
            "error_type": exc.__class__.__name__,
            "status_code": status_code,
            "path": request.url.path,
            "method": request.method,
        }

        if isinstance(exc, StoreFailure):
            logger.error(
                f"Store failure: {exc.message}",
                extra={**log_extra, "exception_chain": handle_exception_chain(exc)},
            )
            return error_response(status_code, exc.error_code, STORE_FAILURE_MESSAGE, request_id)

        if status_code >= 500:
            logger.error(f"Application error: {exc.message}", extra={**log_extra, "details": exc.details})
        else:
            logger.warning(f"Application error: {exc.message}", extra={**log_extra, "details": exc.details})

        validation_errors = exc.validation_errors if isinstance(exc, ValidationError) else None
        return error_response(
            status_code,
            exc.error_code or exc.__class__.__name__,
            exc.message,
            request_id,
            details=exc.details,
            validation_errors=validation_errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        request_id = get_request_id(request)

        logger.warning(
            f"HTTP exception: {exc.detail}",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
                "path": request.url.path,
            }
        )

        return error_response(exc.status_code, exc.status_code, str(exc.detail), request_id)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        request_id = get_request_id(request)
        errors = jsonable_encoder(exc.errors())

        logger.warning(
            "Request validation error",
            extra={
                "request_id": request_id,
                "errors": errors,
                "path": request.url.path,
            }
        )

        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "REQUEST_VALIDATION_ERROR",
            "Validation error",
            request_id,
            validation_errors=errors,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = get_request_id(request)

        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
                "path": request.url.path,
            },
            exc_info=True,
        )

        message = "An internal error occurred" if production else str(exc)

        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            message,
            request_id,
        )

    return app
