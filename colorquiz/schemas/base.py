"""Base Pydantic schemas for the Color Quiz API.

Successful responses share the ``{success, message, data, meta}`` envelope;
errors share ``{error: {code, message, request_id, details}}``.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field

from colorquiz.utils.datetime_utils import utc_now

DataType = TypeVar('DataType')


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = {
        "use_enum_values": True,
        "str_strip_whitespace": True,
        "populate_by_name": True,
    }


class ResponseMetadata(BaseSchema):
    """Metadata included in API responses."""

    request_id: Optional[str] = Field(None, description="Unique request identifier")
    timestamp: datetime = Field(default_factory=utc_now, description="Response timestamp")
    version: str = Field(default="1.0", description="API version")


class BaseResponse(BaseSchema, Generic[DataType]):
    """Base response schema for all API endpoints."""

    success: bool = Field(..., description="Whether the request was successful")
    message: Optional[str] = Field(None, description="Human-readable message")
    data: Optional[DataType] = Field(None, description="Response data")
    meta: Optional[ResponseMetadata] = Field(None, description="Response metadata")


class SuccessResponse(BaseResponse[DataType]):
    """Success response schema."""

    success: bool = Field(default=True, description="Always true for success responses")

    @classmethod
    def create(
        cls,
        data: DataType,
        message: Optional[str] = None,
        meta: Optional[ResponseMetadata] = None
    ) -> "SuccessResponse[DataType]":
        """Create a success response.

        Args:
            data: Response data
            message: Optional success message
            meta: Optional metadata

        Returns:
            SuccessResponse: Success response instance
        """
        return cls(
            success=True,
            data=data,
            message=message,
            meta=meta or ResponseMetadata()
        )


class ErrorDetail(BaseSchema):
    """Error information returned to clients."""

    code: Union[str, int] = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    request_id: Optional[str] = Field(None, description="Request identifier")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    validation_errors: Optional[List[Any]] = Field(None, description="Field-level problems")


class ErrorResponse(BaseSchema):
    """Error envelope."""

    error: ErrorDetail

    @classmethod
    def create(
        cls,
        code: Union[str, int],
        message: str,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        validation_errors: Optional[List[Any]] = None,
    ) -> "ErrorResponse":
        return cls(error=ErrorDetail(
            code=code,
            message=message,
            request_id=request_id,
            details=details or None,
            validation_errors=validation_errors or None,
        ))


def create_success_response(
    data: Any,
    message: Optional[str] = None,
    request_id: Optional[str] = None
) -> SuccessResponse:
    """Create a success response with metadata.

    Args:
        data: Response data
        message: Optional success message
        request_id: Optional request ID

    Returns:
        SuccessResponse: Success response
    """
    meta = ResponseMetadata()
    if request_id:
        meta.request_id = request_id

    return SuccessResponse.create(data=data, message=message, meta=meta)
