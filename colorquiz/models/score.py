"""Derived scoring and progress value objects.

Neither is stored: both are recomputed from persisted answers on request.
"""

from typing import Dict, List

from pydantic import Field

from colorquiz.models.base import EmbeddedDocument
from colorquiz.utils.constants import AttemptStatus


class CategoryScore(EmbeddedDocument):
    """Total score of one category."""

    category: str
    total_score: float = 0.0


class ScoreResult(EmbeddedDocument):
    """Aggregated category totals and the winning category."""

    results: List[CategoryScore] = Field(default_factory=list)
    winner: str
    strategy: str

    def totals(self) -> Dict[str, float]:
        return {score.category: score.total_score for score in self.results}


class Progress(EmbeddedDocument):
    """Completion counters of an attempt or ranking session."""

    assigned: int = Field(..., ge=0)
    answered: int = Field(..., ge=0)
    remaining: int = Field(..., ge=0)
    is_complete: bool

    @classmethod
    def from_counts(cls, assigned: int, answered: int) -> "Progress":
        """Build progress from raw counts.

        Args:
            assigned: Number of assigned questions
            answered: Number of answered questions

        Returns:
            Progress: Derived progress
        """
        return cls(
            assigned=assigned,
            answered=answered,
            remaining=max(0, assigned - answered),
            is_complete=assigned > 0 and answered >= assigned,
        )

    @property
    def status(self) -> AttemptStatus:
        if self.is_complete:
            return AttemptStatus.COMPLETE
        if self.answered == 0:
            return AttemptStatus.ASSIGNED
        return AttemptStatus.IN_PROGRESS
