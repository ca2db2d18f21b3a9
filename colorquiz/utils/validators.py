"""Input validation utilities for Color Quiz.

Validators are pure functions returning a ``ValidationResult``; services turn a
failed result into a ``ValidationError`` with ``ensure_valid``.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from colorquiz.utils.constants import (
    LIKERT_MAX_VALUE,
    LIKERT_MIN_VALUE,
    RANK_POINTS,
    RANKING_ANSWER_COUNT,
)
from colorquiz.utils.exceptions import ValidationError


class ValidationResult(BaseModel):
    """Result of a validation operation."""

    is_valid: bool = Field(..., description="Whether validation passed")
    errors: List[str] = Field(default_factory=list, description="List of validation errors")
    cleaned_value: Optional[Any] = Field(default=None, description="Cleaned/normalized value")

    def add_error(self, error: str) -> None:
        """Add a validation error."""
        self.errors.append(error)
        self.is_valid = False

    @classmethod
    def success(cls, cleaned_value: Optional[Any] = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True, cleaned_value=cleaned_value)

    @classmethod
    def failure(cls, errors: Union[str, List[str]]) -> "ValidationResult":
        """Create a failed validation result."""
        if isinstance(errors, str):
            errors = [errors]
        return cls(is_valid=False, errors=errors)


def ensure_valid(result: ValidationResult, field: str, value: Any = None) -> Any:
    """Return the cleaned value or raise ``ValidationError`` for ``field``.

    Args:
        result: Validation result to check
        field: Name of the validated field
        value: Raw value, echoed back in the error details

    Returns:
        Any: The cleaned value

    Raises:
        ValidationError: If the result is not valid
    """
    if not result.is_valid:
        raise ValidationError(
            result.errors[0],
            field=field,
            value=value,
            validation_errors=result.errors,
        )
    return result.cleaned_value


def validate_identifier(value: Any, label: str = "Identifier") -> ValidationResult:
    """Validate an opaque identifier such as an attempt, question or option id.

    Args:
        value: Candidate identifier
        label: Human-readable name used in the error message

    Returns:
        ValidationResult: Validation result with the stripped identifier
    """
    if not isinstance(value, str):
        return ValidationResult.failure(f"{label} must be a string")

    cleaned = value.strip()
    if not cleaned:
        return ValidationResult.failure(f"{label} is required")

    return ValidationResult.success(cleaned)


def validate_likert_value(value: Any) -> ValidationResult:
    """Validate a LIKERT answer value.

    Args:
        value: Candidate value; must be an integer, booleans are rejected

    Returns:
        ValidationResult: Validation result with the integer value
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return ValidationResult.failure("Likert value must be an integer")

    if not LIKERT_MIN_VALUE <= value <= LIKERT_MAX_VALUE:
        return ValidationResult.failure(
            f"Likert value must be between {LIKERT_MIN_VALUE} and {LIKERT_MAX_VALUE}"
        )

    return ValidationResult.success(value)


def validate_ranked_items(items: Sequence[Dict[str, Any]]) -> ValidationResult:
    """Validate one ranking submission.

    A submission ranks every candidate answer of a question exactly once:
    exactly four items, ranks forming the set {1, 2, 3, 4}, and a distinct,
    non-empty answer id on each item.

    Args:
        items: Sequence of ``{"answer_id": ..., "rank": ...}`` mappings

    Returns:
        ValidationResult: Validation result with ``[(answer_id, rank), ...]``
    """
    if items is None or len(items) != RANKING_ANSWER_COUNT:
        return ValidationResult.failure(
            f"Must rank exactly {RANKING_ANSWER_COUNT} answers"
        )

    result = ValidationResult.success()
    cleaned = []

    for item in items:
        if not isinstance(item, dict):
            result.add_error("Each ranked item must be an object")
            continue
        answer_id = item.get("answer_id")
        rank = item.get("rank")

        if not isinstance(answer_id, str) or not answer_id.strip():
            result.add_error("Each ranked item needs an answer_id")
            continue
        if isinstance(rank, bool) or not isinstance(rank, int):
            result.add_error(f"Rank for answer {answer_id} must be an integer")
            continue
        cleaned.append((answer_id.strip(), rank))

    if not result.is_valid:
        return result

    ranks = sorted(rank for _, rank in cleaned)
    if ranks != sorted(RANK_POINTS):
        result.add_error("Ranks must be exactly 1, 2, 3, 4")

    answer_ids = [answer_id for answer_id, _ in cleaned]
    if len(set(answer_ids)) != len(answer_ids):
        result.add_error("Each answer may be ranked only once")

    if result.is_valid:
        result.cleaned_value = cleaned
    return result


def validate_categories(categories: Sequence[str]) -> ValidationResult:
    """Validate a configured category set.

    Args:
        categories: Category keys in configured order

    Returns:
        ValidationResult: Validation result with lower-cased keys
    """
    if not categories:
        return ValidationResult.failure("At least one category is required")

    cleaned = [str(category).strip().lower() for category in categories]
    if any(not category for category in cleaned):
        return ValidationResult.failure("Category keys must be non-empty")
    if len(set(cleaned)) != len(cleaned):
        return ValidationResult.failure("Category keys must be unique")

    return ValidationResult.success(cleaned)
