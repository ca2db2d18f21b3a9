"""Request and response schemas for attempt endpoints."""

from typing import Any, List, Optional

from pydantic import Field

from colorquiz.models.score import Progress, ScoreResult
from colorquiz.schemas.base import BaseSchema
from colorquiz.utils.constants import AttemptStatus, QuestionType


class AttemptCreatedResponse(BaseSchema):
    """A newly created attempt."""

    attempt_id: str
    question_count: int


class OptionView(BaseSchema):
    """An option as shown to the participant."""

    id: str
    label: str
    position: int = Field(..., description="1-based display position")


class QuestionView(BaseSchema):
    """A question slot as shown to the participant."""

    position: int
    qtype: QuestionType
    id: str
    prompt: str
    category: Optional[str] = Field(None, description="Scoring category of a LIKERT question")
    options: Optional[List[OptionView]] = Field(None, description="SINGLE_CHOICE options in display order")


class AttemptView(BaseSchema):
    """An attempt's questions in position order."""

    attempt_id: str
    locale: str
    questions: List[QuestionView] = Field(default_factory=list)


class AnswerSubmitRequest(BaseSchema):
    """Answer to one question.

    ``likert_value`` is required for ``likert`` questions and ``option_id``
    for ``single`` questions.
    """

    question_id: str = Field(..., description="Question being answered")
    qtype: str = Field(..., description="likert or single")
    likert_value: Optional[Any] = Field(None, description="Integer from 0 (disagree) to 4 (agree)")
    option_id: Optional[str] = Field(None, description="Chosen option")

    model_config = {
        **BaseSchema.model_config,
        "json_schema_extra": {
            "example": {
                "question_id": "q_001",
                "qtype": "likert",
                "likert_value": 3,
            }
        }
    }

    def answer_value(self):
        """The value matching ``qtype``, or None when absent."""
        if self.qtype.strip().lower() == QuestionType.LIKERT.value:
            return self.likert_value
        return self.option_id


class AnswerRecordedResponse(BaseSchema):
    ok: bool = True
    attempt_id: str
    question_id: str
    qtype: QuestionType


class ProgressResponse(BaseSchema):
    """Completion counters of an attempt."""

    attempt_id: str
    assigned: int
    answered: int
    remaining: int
    is_complete: bool
    status: AttemptStatus

    @classmethod
    def from_progress(cls, attempt_id: str, progress: Progress) -> "ProgressResponse":
        return cls(
            attempt_id=attempt_id,
            assigned=progress.assigned,
            answered=progress.answered,
            remaining=progress.remaining,
            is_complete=progress.is_complete,
            status=progress.status,
        )


class CategoryScoreResponse(BaseSchema):
    color: str
    total_score: float


class AttemptResultsResponse(BaseSchema):
    """Scored attempt."""

    attempt_id: str
    results: List[CategoryScoreResponse]
    winner_color: str
    strategy: str

    @classmethod
    def from_result(cls, attempt_id: str, result: ScoreResult) -> "AttemptResultsResponse":
        return cls(
            attempt_id=attempt_id,
            results=[
                CategoryScoreResponse(color=score.category, total_score=score.total_score)
                for score in result.results
            ],
            winner_color=result.winner,
            strategy=result.strategy,
        )
