"""Question bank models.

Questions and options are read-only to the quiz engine. An option carries a
weight vector over the scoring categories; for ranking questions the options
are the four candidate answers being ranked.
"""

from typing import Dict, List, Optional

from pydantic import Field, field_validator

from colorquiz.models.base import BaseDocument
from colorquiz.utils.constants import QuestionType


class Question(BaseDocument):
    """A question in the bank."""

    qtype: QuestionType = Field(..., description="Question type")
    prompt: str = Field(default="", description="Prompt in the original language")
    translations: Dict[str, str] = Field(
        default_factory=dict, description="Localized prompts keyed by locale"
    )
    category: Optional[str] = Field(
        default=None, description="Category a LIKERT value is added to"
    )
    is_active: bool = Field(default=True)

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None

    def localized_prompt(self, locale: str) -> str:
        """Prompt in ``locale``, falling back to the original text.

        Args:
            locale: Resolved locale

        Returns:
            str: Localized or original prompt
        """
        return self.translations.get(locale) or self.prompt

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        return [
            ([("qtype", 1), ("is_active", 1)], {}),
        ]


class Option(BaseDocument):
    """An answer option, or a candidate answer of a ranking question."""

    question_id: str = Field(..., description="Owning question")
    label: str = Field(default="", description="Label in the original language")
    translations: Dict[str, str] = Field(default_factory=dict)
    sort_order: int = Field(default=0, description="Position in storage order")
    weights: Dict[str, float] = Field(
        default_factory=dict, description="Non-negative weight per category"
    )

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Normalize category keys and reject negative weights."""
        normalized = {}
        for category, weight in v.items():
            if weight < 0:
                raise ValueError(f"Weight for {category} must be non-negative")
            normalized[category.strip().lower()] = float(weight)
        return normalized

    def localized_label(self, locale: str) -> str:
        return self.translations.get(locale) or self.label

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        return [
            ([("question_id", 1), ("sort_order", 1)], {}),
        ]


def storage_order(options: List[Option]) -> List[Option]:
    """Sort options into canonical storage order.

    Args:
        options: Options of one question

    Returns:
        List[Option]: Options ordered by ``sort_order`` then id
    """
    return sorted(options, key=lambda option: (option.sort_order, option.id))
