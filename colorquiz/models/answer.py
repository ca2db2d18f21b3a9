"""Answer model for recorded attempt answers."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from colorquiz.models.base import BaseDocument
from colorquiz.utils.constants import QuestionType
from colorquiz.utils.datetime_utils import utc_now


class Answer(BaseDocument):
    """The recorded answer to one question of one attempt.

    Exactly one of ``likert_value`` and ``option_id`` is set, matching
    ``qtype``. At most one answer exists per ``(attempt_id, question_id)``.
    """

    attempt_id: str
    question_id: str
    qtype: QuestionType
    likert_value: Optional[int] = Field(default=None, ge=0, le=4)
    option_id: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_value_matches_type(self) -> "Answer":
        """Ensure the value field matches the question type."""
        if self.qtype == QuestionType.LIKERT:
            if self.likert_value is None or self.option_id is not None:
                raise ValueError("Likert answers carry likert_value only")
        elif self.qtype == QuestionType.SINGLE_CHOICE:
            if not self.option_id or self.likert_value is not None:
                raise ValueError("Single choice answers carry option_id only")
        else:
            raise ValueError(f"Attempts do not accept {self.qtype} answers")
        return self

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        return [
            ([("attempt_id", 1), ("question_id", 1)], {"unique": True}),
        ]
