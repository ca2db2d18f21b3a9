"""Attempt and option order models."""

from typing import List, Optional

from pydantic import Field

from colorquiz.models.base import BaseDocument, EmbeddedDocument
from colorquiz.utils.constants import QuestionType


class AssignedQuestion(EmbeddedDocument):
    """A question slot in an attempt's battery."""

    position: int = Field(..., ge=1, description="1-based display position")
    question_id: str
    qtype: QuestionType


class Attempt(BaseDocument):
    """One run-through of the quiz.

    The assigned battery is embedded and written together with the attempt, so
    an attempt is never observable without its questions.
    """

    questions: List[AssignedQuestion] = Field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return len(self.questions)

    @property
    def question_ids(self) -> List[str]:
        return [question.question_id for question in self.ordered_questions()]

    def ordered_questions(self) -> List[AssignedQuestion]:
        return sorted(self.questions, key=lambda question: question.position)

    def find_question(self, question_id: str) -> Optional[AssignedQuestion]:
        """Look up an assigned question.

        Args:
            question_id: Question id

        Returns:
            Optional[AssignedQuestion]: The slot, or None when not assigned
        """
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None


class OptionOrder(BaseDocument):
    """Persisted option permutation for one question within one scope.

    The scope is an attempt id or a ranking session id.
    """

    scope: str
    question_id: str
    option_ids: List[str] = Field(default_factory=list)

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        return [
            ([("scope", 1), ("question_id", 1)], {"unique": True}),
        ]
