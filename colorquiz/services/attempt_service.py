"""Attempt lifecycle service.

This service is the single entry point for the attempt flow: creating an
attempt with its question battery, rendering the localized view, and
delegating answer recording, progress and scoring.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from colorquiz.database.stores import AttemptStore, QuestionBank
from colorquiz.models.answer import Answer
from colorquiz.models.attempt import AssignedQuestion, Attempt
from colorquiz.models.base import new_object_id
from colorquiz.models.question import Option, Question
from colorquiz.models.score import Progress, ScoreResult
from colorquiz.schemas.attempt_schemas import AttemptView, OptionView, QuestionView
from colorquiz.services.allocator import QuestionAllocator
from colorquiz.services.answer_service import AnswerService
from colorquiz.services.order_service import OptionOrderService
from colorquiz.services.progress_service import ProgressService
from colorquiz.services.scoring_service import ScoringService
from colorquiz.utils.constants import ATTEMPT_QUESTION_TYPES, DEFAULT_LOCALE, QuestionType
from colorquiz.utils.exceptions import AllocationError, ResourceNotFoundError
from colorquiz.utils.logger import get_business_logger

logger = get_business_logger()


class AttemptService:
    """Service orchestrating the attempt lifecycle."""

    def __init__(
        self,
        attempt_store: AttemptStore,
        question_bank: QuestionBank,
        allocator: QuestionAllocator,
        order_service: OptionOrderService,
        answer_service: AnswerService,
        progress_service: ProgressService,
        scoring_service: ScoringService,
        question_count: int,
        settings: Any = None,
    ):
        """Initialize attempt service.

        Args:
            attempt_store: Store holding attempts and answers
            question_bank: Read-only question bank
            allocator: Picks the battery for new attempts
            order_service: Per-attempt option ordering
            answer_service: Answer recorder
            progress_service: Progress calculator
            scoring_service: Scoring engine
            question_count: Size of every attempt's battery
            settings: Application settings, used for locale resolution
        """
        self.attempt_store = attempt_store
        self.question_bank = question_bank
        self.allocator = allocator
        self.order_service = order_service
        self.answer_service = answer_service
        self.progress_service = progress_service
        self.scoring_service = scoring_service
        self.question_count = question_count
        self.settings = settings

    async def create_attempt(self) -> Attempt:
        """Create an attempt with a freshly allocated question battery.

        The attempt and its questions are written in one insert, so a failed
        allocation leaves nothing behind.

        Returns:
            Attempt: The stored attempt

        Raises:
            AllocationError: If the allocator does not return exactly
                ``question_count`` distinct, known questions of attempt types
            StoreFailure: If the insert fails
        """
        attempt_id = new_object_id()
        question_ids = await self.allocator.allocate(
            attempt_id, self.question_count, ATTEMPT_QUESTION_TYPES
        )
        assigned = await self._build_battery(question_ids)

        attempt = Attempt(_id=attempt_id, questions=assigned)
        await self.attempt_store.create_attempt(attempt)

        logger.info(
            "Attempt created",
            extra={"attempt_id": attempt_id, "question_count": attempt.assigned_count}
        )
        return attempt

    async def get_attempt_view(self, attempt_id: str, locale: Optional[str] = None) -> AttemptView:
        """Render an attempt's questions for display.

        Args:
            attempt_id: Attempt to render
            locale: Requested locale; unsupported locales fall back to the default

        Returns:
            AttemptView: Questions in position order with localized text and
                per-attempt option order

        Raises:
            ResourceNotFoundError: If the attempt does not exist
            StoreFailure: If reads or the first order write fail
        """
        resolved_locale = self._resolve_locale(locale)
        attempt = await self._get_attempt(attempt_id)
        slots = attempt.ordered_questions()

        questions = await self.question_bank.get_questions([slot.question_id for slot in slots])
        questions_by_id = {question.id: question for question in questions}

        choice_ids = [
            slot.question_id for slot in slots if slot.qtype == QuestionType.SINGLE_CHOICE
        ]
        options_by_question = self._group_options(await self.question_bank.get_options(choice_ids))

        views = []
        for slot in slots:
            question = questions_by_id.get(slot.question_id)
            if question is None:
                logger.warning(
                    "Assigned question missing from bank",
                    extra={"attempt_id": attempt.id, "question_id": slot.question_id}
                )
            views.append(await self._question_view(
                attempt.id, slot, question, options_by_question, resolved_locale
            ))

        return AttemptView(attempt_id=attempt.id, locale=resolved_locale, questions=views)

    async def record_answer(self, attempt_id: str, question_id: str, qtype: str, value: Any) -> Answer:
        return await self.answer_service.record_answer(attempt_id, question_id, qtype, value)

    async def get_progress(self, attempt_id: str) -> Progress:
        return await self.progress_service.get_progress(attempt_id)

    async def finish(self, attempt_id: str) -> ScoreResult:
        return await self.scoring_service.finish(attempt_id)

    async def get_results(self, attempt_id: str) -> ScoreResult:
        return await self.scoring_service.get_results(attempt_id)

    # Private helper methods

    async def _get_attempt(self, attempt_id: str) -> Attempt:
        attempt = await self.attempt_store.get_attempt(attempt_id)
        if attempt is None:
            raise ResourceNotFoundError(
                f"Attempt {attempt_id} not found",
                resource_type="attempt",
                resource_id=attempt_id,
            )
        return attempt

    async def _build_battery(self, question_ids: Sequence[str]) -> List[AssignedQuestion]:
        """Verify the allocator's output and turn it into position slots."""
        if len(question_ids) != self.question_count or len(set(question_ids)) != len(question_ids):
            raise AllocationError(
                f"Expected {self.question_count} distinct questions",
                expected=self.question_count,
                received=len(set(question_ids)),
            )

        questions = await self.question_bank.get_questions(question_ids)
        qtypes = {question.id: question.qtype for question in questions}

        unusable = [
            question_id for question_id in question_ids
            if qtypes.get(question_id) not in ATTEMPT_QUESTION_TYPES
        ]
        if unusable:
            raise AllocationError(
                "Allocator returned unknown or unsupported questions",
                expected=self.question_count,
                received=self.question_count - len(unusable),
                details={"question_ids": unusable[:10]},
            )

        return [
            AssignedQuestion(position=index, question_id=question_id, qtype=qtypes[question_id])
            for index, question_id in enumerate(question_ids, start=1)
        ]

    async def _question_view(
        self,
        attempt_id: str,
        slot: AssignedQuestion,
        question: Optional[Question],
        options_by_question: Dict[str, List[Option]],
        locale: str,
    ) -> QuestionView:
        view = QuestionView(
            position=slot.position,
            qtype=slot.qtype,
            id=slot.question_id,
            prompt=question.localized_prompt(locale) if question else "",
        )

        if slot.qtype == QuestionType.LIKERT:
            view.category = question.category if question else None
        elif question is not None:
            ordered = await self.order_service.get_ordered_options(
                attempt_id, slot.question_id, options_by_question.get(slot.question_id, [])
            )
            view.options = [
                OptionView(id=option.id, label=option.localized_label(locale), position=index)
                for index, option in enumerate(ordered, start=1)
            ]
        else:
            view.options = []

        return view

    def _group_options(self, options: Sequence[Option]) -> Dict[str, List[Option]]:
        grouped: Dict[str, List[Option]] = defaultdict(list)
        for option in options:
            grouped[option.question_id].append(option)
        return grouped

    def _resolve_locale(self, locale: Optional[str]) -> str:
        if self.settings is not None:
            return self.settings.resolve_locale(locale)
        return (locale or DEFAULT_LOCALE).strip().lower() or DEFAULT_LOCALE
