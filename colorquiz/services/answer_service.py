"""Answer service for recording attempt answers.

Answers are upserted on ``(attempt_id, question_id)``: re-answering a question
replaces the previous answer, so each question is counted at most once.
"""

from typing import Any, Union

from colorquiz.database.stores import AttemptStore
from colorquiz.models.answer import Answer
from colorquiz.utils.constants import ATTEMPT_QUESTION_TYPES, QuestionType
from colorquiz.utils.exceptions import ResourceNotFoundError, ValidationError
from colorquiz.utils.logger import get_business_logger
from colorquiz.utils.validators import (
    ensure_valid,
    validate_identifier,
    validate_likert_value,
)

logger = get_business_logger()


class AnswerService:
    """Service for recording answers."""

    def __init__(self, attempt_store: AttemptStore):
        """Initialize answer service.

        Args:
            attempt_store: Store holding attempts and answers
        """
        self.attempt_store = attempt_store

    async def record_answer(
        self,
        attempt_id: str,
        question_id: str,
        qtype: Union[QuestionType, str],
        value: Any,
    ) -> Answer:
        """Record or replace the answer to one question.

        Args:
            attempt_id: Attempt being answered
            question_id: Question being answered
            qtype: ``likert`` or ``single``
            value: Integer 0..4 for LIKERT, option id for SINGLE_CHOICE

        Returns:
            Answer: The answer as written

        Raises:
            ValidationError: If any input is malformed, the question is not
                part of the attempt, or the type does not match the question
            ResourceNotFoundError: If the attempt does not exist
            StoreFailure: If the write fails
        """
        attempt_id = ensure_valid(validate_identifier(attempt_id, "Attempt id"), "attempt_id")
        question_id = ensure_valid(validate_identifier(question_id, "Question id"), "question_id", question_id)
        answer_type = self._parse_qtype(qtype)

        if answer_type == QuestionType.LIKERT:
            likert_value = ensure_valid(validate_likert_value(value), "likert_value", value)
            option_id = None
        else:
            option_id = ensure_valid(validate_identifier(value, "Option id"), "option_id", value)
            likert_value = None

        attempt = await self.attempt_store.get_attempt(attempt_id)
        if attempt is None:
            raise ResourceNotFoundError(
                f"Attempt {attempt_id} not found",
                resource_type="attempt",
                resource_id=attempt_id,
            )

        assigned = attempt.find_question(question_id)
        if assigned is None:
            raise ValidationError(
                "Question is not part of this attempt",
                field="question_id",
                value=question_id,
            )
        if assigned.qtype != answer_type:
            raise ValidationError(
                f"Question {question_id} is a {assigned.qtype} question",
                field="qtype",
                value=answer_type.value,
            )

        answer = Answer(
            attempt_id=attempt_id,
            question_id=question_id,
            qtype=answer_type,
            likert_value=likert_value,
            option_id=option_id,
        )
        await self.attempt_store.upsert_answer(answer)

        logger.info(
            "Answer recorded",
            extra={
                "attempt_id": attempt_id,
                "question_id": question_id,
                "qtype": answer_type.value,
            }
        )
        return answer

    # Private helper methods

    def _parse_qtype(self, qtype: Union[QuestionType, str]) -> QuestionType:
        try:
            parsed = QuestionType.parse(qtype)
        except ValueError:
            parsed = None

        if parsed not in ATTEMPT_QUESTION_TYPES:
            raise ValidationError(
                "qtype must be 'likert' or 'single'",
                field="qtype",
                value=str(qtype),
            )
        return parsed
