"""Ranking session models.

A ranking session is the ranking-style variant of an attempt: each question has
four candidate answers which the participant orders from 1 (most like me) to 4.
All ranks of one question live in a single ``QuestionRanking`` document so a
question is either fully ranked or not ranked at all.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from colorquiz.models.base import BaseDocument
from colorquiz.utils.datetime_utils import utc_now


class RankingSession(BaseDocument):
    """A ranking run-through over an ordered list of questions."""

    question_ids: List[str] = Field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return len(self.question_ids)


class RankedAnswer(BaseModel):
    answer_id: str
    rank: int = Field(..., ge=1, le=4)


class QuestionRanking(BaseDocument):
    """Stored ranks of every candidate answer of one question in a session."""

    session_id: str
    question_id: str
    ranks: List[RankedAnswer] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utc_now)

    def rows(self) -> List["Ranking"]:
        """Flatten the stored ranks into one ``Ranking`` per answer."""
        return [
            Ranking(
                session_id=self.session_id,
                question_id=self.question_id,
                answer_id=item.answer_id,
                rank=item.rank,
                updated_at=self.updated_at,
            )
            for item in self.ranks
        ]

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        return [
            ([("session_id", 1), ("question_id", 1)], {"unique": True}),
            ([("session_id", 1)], {}),
        ]


class Ranking(BaseDocument):
    """Rank given to one candidate answer of one question in a session."""

    session_id: str
    question_id: str
    answer_id: str
    rank: int = Field(..., ge=1, le=4)
    updated_at: datetime = Field(default_factory=utc_now)
