"""Request and response schemas for ranking session endpoints."""

from typing import Dict, List, Optional

from pydantic import Field, StrictInt

from colorquiz.models.score import Progress, ScoreResult
from colorquiz.schemas.attempt_schemas import CategoryScoreResponse, OptionView
from colorquiz.schemas.base import BaseSchema
from colorquiz.utils.constants import AttemptStatus


class SessionCreatedResponse(BaseSchema):
    session_id: str
    question_count: int


class RankingQuestionView(BaseSchema):
    id: str
    prompt: str


class NextQuestionResponse(BaseSchema):
    """The next unranked question of a session."""

    session_id: str
    done: bool
    index: int = Field(..., description="0-based index of the question in the session")
    total: int
    question: Optional[RankingQuestionView] = None
    answers: List[OptionView] = Field(default_factory=list)


class RankedItem(BaseSchema):
    answer_id: str
    rank: StrictInt = Field(..., description="1 (most like me) to 4")


class RankingSubmitRequest(BaseSchema):
    """Ranks for all four candidate answers of one question."""

    question_id: str
    ranked: List[RankedItem]

    model_config = {
        **BaseSchema.model_config,
        "json_schema_extra": {
            "example": {
                "question_id": "rq_001",
                "ranked": [
                    {"answer_id": "a1", "rank": 1},
                    {"answer_id": "a2", "rank": 2},
                    {"answer_id": "a3", "rank": 3},
                    {"answer_id": "a4", "rank": 4},
                ],
            }
        }
    }


class RankingSavedResponse(BaseSchema):
    saved: bool = True
    question_id: str
    totals: List[CategoryScoreResponse]

    @classmethod
    def from_totals(cls, question_id: str, totals: Dict[str, float]) -> "RankingSavedResponse":
        return cls(
            question_id=question_id,
            totals=[
                CategoryScoreResponse(color=category, total_score=total)
                for category, total in totals.items()
            ],
        )


class SessionProgressResponse(BaseSchema):
    session_id: str
    assigned: int
    answered: int
    remaining: int
    is_complete: bool
    status: AttemptStatus

    @classmethod
    def from_progress(cls, session_id: str, progress: Progress) -> "SessionProgressResponse":
        return cls(
            session_id=session_id,
            assigned=progress.assigned,
            answered=progress.answered,
            remaining=progress.remaining,
            is_complete=progress.is_complete,
            status=progress.status,
        )


class SessionResultsResponse(BaseSchema):
    session_id: str
    results: List[CategoryScoreResponse]
    winner_color: str
    strategy: str

    @classmethod
    def from_result(cls, session_id: str, result: ScoreResult) -> "SessionResultsResponse":
        return cls(
            session_id=session_id,
            results=[
                CategoryScoreResponse(color=score.category, total_score=score.total_score)
                for score in result.results
            ],
            winner_color=result.winner,
            strategy=result.strategy,
        )
