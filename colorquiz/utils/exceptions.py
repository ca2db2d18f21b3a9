"""Custom exception classes for the Color Quiz application.

This module defines the exception hierarchy raised by the quiz services and
translated into HTTP responses by the API layer.
"""

from typing import Any, Dict, List, Optional


class ColorQuizError(Exception):
    """Base exception class for all Color Quiz application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize Color Quiz error.

        Args:
            message: Error message
            error_code: Application-specific error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation.

        Returns:
            Dict[str, Any]: Exception data
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        parts = [self.message]
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        if self.details:
            parts.append(f"Details: {self.details}")
        return " | ".join(parts)


class ValidationError(ColorQuizError):
    """Exception for malformed client input."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[List[str]] = None,
        **kwargs
    ):
        """Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            value: Invalid value
            validation_errors: List of specific validation errors
            **kwargs: Additional arguments for parent class
        """
        details = kwargs.get("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        if validation_errors:
            details["validation_errors"] = validation_errors

        kwargs["details"] = details
        kwargs.setdefault("error_code", "VALIDATION_ERROR")
        super().__init__(message, **kwargs)

        self.field = field
        self.value = value
        self.validation_errors = validation_errors or []


class ResourceNotFoundError(ColorQuizError):
    """Exception for when a requested attempt or session does not exist."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs
    ):
        """Initialize resource not found error.

        Args:
            message: Error message
            resource_type: Type of resource (attempt, session)
            resource_id: ID of the resource
            **kwargs: Additional arguments for parent class
        """
        details = kwargs.get("details", {})
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        kwargs["details"] = details
        kwargs.setdefault("error_code", "NOT_FOUND")
        super().__init__(message, **kwargs)

        self.resource_type = resource_type
        self.resource_id = resource_id


class IncompleteError(ColorQuizError):
    """Raised when scoring is requested before every question is answered."""

    def __init__(
        self,
        assigned: int,
        answered: int,
        message: str = "Not all questions have been answered.",
        **kwargs
    ):
        """Initialize incomplete error.

        Args:
            assigned: Number of questions assigned
            answered: Number of questions answered
            message: Error message
            **kwargs: Additional arguments for parent class
        """
        remaining = max(0, assigned - answered)
        details = kwargs.get("details", {})
        details.update({
            "assigned": assigned,
            "answered": answered,
            "remaining": remaining,
            "is_complete": False,
        })

        kwargs["details"] = details
        kwargs.setdefault("error_code", "INCOMPLETE")
        super().__init__(message, **kwargs)

        self.assigned = assigned
        self.answered = answered
        self.remaining = remaining


class DataIntegrityError(ColorQuizError):
    """Exception for inconsistent question bank or attempt data."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "DATA_INTEGRITY")
        super().__init__(message, **kwargs)


class NoQuestionsError(DataIntegrityError):
    """Raised when an attempt or session has zero assigned questions."""

    def __init__(self, message: str = "No questions assigned to this attempt.", **kwargs):
        kwargs.setdefault("error_code", "NO_QUESTIONS")
        super().__init__(message, **kwargs)


class AllocationError(ColorQuizError):
    """Raised when the question allocator does not yield the expected battery."""

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        received: Optional[int] = None,
        **kwargs
    ):
        """Initialize allocation error.

        Args:
            message: Error message
            expected: Number of questions requested
            received: Number of usable questions returned
            **kwargs: Additional arguments for parent class
        """
        details = kwargs.get("details", {})
        if expected is not None:
            details["expected"] = expected
        if received is not None:
            details["received"] = received

        kwargs["details"] = details
        kwargs.setdefault("error_code", "ALLOCATION_FAILED")
        super().__init__(message, **kwargs)

        self.expected = expected
        self.received = received


class StoreFailure(ColorQuizError):
    """Exception for persistence layer failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs
    ):
        """Initialize store failure.

        Args:
            message: Error message
            operation: Database operation (find, insert, update, count)
            collection: Collection name
            **kwargs: Additional arguments for parent class
        """
        details = kwargs.get("details", {})
        if operation:
            details["operation"] = operation
        if collection:
            details["collection"] = collection

        kwargs["details"] = details
        kwargs.setdefault("error_code", "STORE_FAILURE")
        super().__init__(message, **kwargs)

        self.operation = operation
        self.collection = collection


def handle_exception_chain(exception: Exception) -> List[Dict[str, Any]]:
    """Walk an exception's cause chain for structured logging.

    Args:
        exception: Exception to walk

    Returns:
        List[Dict[str, Any]]: One entry per exception, outermost first
    """
    chain = []
    current: Optional[BaseException] = exception

    while current is not None:
        if isinstance(current, ColorQuizError):
            chain.append(current.to_dict())
        else:
            chain.append({
                "error_type": current.__class__.__name__,
                "message": str(current),
            })
        current = current.__cause__

    return chain
