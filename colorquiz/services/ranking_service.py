"""Ranking session service.

A ranking session walks the participant through ranking questions one at a
time. Each question has four candidate answers ranked 1 (most like me) to 4;
ranks convert to points which multiply the candidate's weight vector.
"""

from typing import Any, Dict, List, Optional, Sequence, Set

from colorquiz.database.stores import QuestionBank, RankingStore
from colorquiz.models.base import new_object_id
from colorquiz.models.ranking import Ranking, RankingSession
from colorquiz.models.score import Progress, ScoreResult
from colorquiz.schemas.attempt_schemas import OptionView
from colorquiz.schemas.ranking_schemas import NextQuestionResponse, RankingQuestionView
from colorquiz.services.allocator import QuestionAllocator
from colorquiz.services.order_service import OptionOrderService
from colorquiz.services.scoring_service import ScoringService
from colorquiz.services.weighting import RankPointStrategy, ScoringCatalog
from colorquiz.utils.constants import DEFAULT_LOCALE, RANKING_ANSWER_COUNT, QuestionType
from colorquiz.utils.exceptions import (
    AllocationError,
    DataIntegrityError,
    ResourceNotFoundError,
    ValidationError,
)
from colorquiz.utils.logger import PerformanceLogger, get_business_logger
from colorquiz.utils.validators import ensure_valid, validate_identifier, validate_ranked_items

logger = get_business_logger()


def complete_rank_sets(rankings: List[Ranking]) -> List[Ranking]:
    """Drop the rows of questions whose candidates are not all ranked.

    A question counts as ranked only when it has a row for
    ``RANKING_ANSWER_COUNT`` distinct answers.
    """
    answers: Dict[str, Set[str]] = {}
    for ranking in rankings:
        answers.setdefault(ranking.question_id, set()).add(ranking.answer_id)

    complete = {
        question_id for question_id, answer_ids in answers.items()
        if len(answer_ids) == RANKING_ANSWER_COUNT
    }
    return [ranking for ranking in rankings if ranking.question_id in complete]


class RankingService:
    """Service for ranking sessions."""

    def __init__(
        self,
        ranking_store: RankingStore,
        question_bank: QuestionBank,
        allocator: QuestionAllocator,
        order_service: OptionOrderService,
        scoring_service: ScoringService,
        question_count: int,
        settings: Any = None,
    ):
        """Initialize ranking service.

        Args:
            ranking_store: Store holding sessions and ranks
            question_bank: Ranking questions and their candidate answers
            allocator: Picks the session's questions
            order_service: Per-session candidate ordering
            scoring_service: Shared scoring engine
            question_count: Number of questions per session
            settings: Application settings, used for locale resolution
        """
        self.ranking_store = ranking_store
        self.question_bank = question_bank
        self.allocator = allocator
        self.order_service = order_service
        self.scoring_service = scoring_service
        self.question_count = question_count
        self.settings = settings
        self.strategy = RankPointStrategy()

    async def create_session(self) -> RankingSession:
        """Create a ranking session over freshly allocated ranking questions.

        Raises:
            AllocationError: If the allocator output is short, duplicated or
                not made of known ranking questions
        """
        session_id = new_object_id()
        question_ids = await self.allocator.allocate(
            session_id, self.question_count, [QuestionType.RANKING]
        )

        if len(question_ids) != self.question_count or len(set(question_ids)) != len(question_ids):
            raise AllocationError(
                f"Expected {self.question_count} distinct ranking questions",
                expected=self.question_count,
                received=len(set(question_ids)),
            )

        questions = await self.question_bank.get_questions(question_ids)
        known = {q.id for q in questions if q.qtype == QuestionType.RANKING}
        missing = [question_id for question_id in question_ids if question_id not in known]
        if missing:
            raise AllocationError(
                "Allocator returned unknown or non-ranking questions",
                expected=self.question_count,
                received=self.question_count - len(missing),
                details={"question_ids": missing[:10]},
            )

        session = RankingSession(_id=session_id, question_ids=list(question_ids))
        await self.ranking_store.create_session(session)

        logger.info(
            "Ranking session created",
            extra={"session_id": session_id, "question_count": session.assigned_count}
        )
        return session

    async def get_next_question(self, session_id: str, locale: Optional[str] = None) -> NextQuestionResponse:
        """Return the first question of the session that has no ranks yet.

        Raises:
            ResourceNotFoundError: If the session does not exist
            DataIntegrityError: If the question does not have exactly four
                candidate answers
        """
        resolved_locale = self._resolve_locale(locale)
        session = await self._get_session(session_id)
        ranked = await self._ranked_question_ids(session.id)
        total = session.assigned_count

        index = next(
            (i for i, question_id in enumerate(session.question_ids) if question_id not in ranked),
            None,
        )
        if index is None:
            return NextQuestionResponse(session_id=session.id, done=True, index=total, total=total)

        question_id = session.question_ids[index]
        questions = await self.question_bank.get_questions([question_id])
        if not questions:
            raise DataIntegrityError(
                f"Ranking question {question_id} missing from bank",
                details={"session_id": session.id, "question_id": question_id},
            )
        question = questions[0]

        candidates = await self.question_bank.get_options([question_id])
        if len(candidates) != RANKING_ANSWER_COUNT:
            raise DataIntegrityError(
                f"Ranking question {question_id} has {len(candidates)} candidate answers, "
                f"expected {RANKING_ANSWER_COUNT}",
                details={"question_id": question_id, "candidate_count": len(candidates)},
            )

        ordered = await self.order_service.get_ordered_options(session.id, question_id, candidates)
        return NextQuestionResponse(
            session_id=session.id,
            done=False,
            index=index,
            total=total,
            question=RankingQuestionView(id=question.id, prompt=question.localized_prompt(resolved_locale)),
            answers=[
                OptionView(id=option.id, label=option.localized_label(resolved_locale), position=position)
                for position, option in enumerate(ordered, start=1)
            ],
        )

    async def submit_ranking(
        self,
        session_id: str,
        question_id: str,
        ranked: Sequence[Dict[str, Any]],
    ) -> Dict[str, float]:
        """Store the ranks of one question and return running totals.

        Resubmitting a question replaces its earlier ranks.

        Args:
            session_id: Session id
            question_id: Ranked question
            ranked: ``{"answer_id", "rank"}`` items, one per candidate

        Returns:
            Dict[str, float]: Category totals over every rank stored so far

        Raises:
            ValidationError: If the ranks are malformed, the question is not in
                the session, or an answer is not one of its candidates
            ResourceNotFoundError: If the session does not exist
        """
        session_id = ensure_valid(validate_identifier(session_id, "Session id"), "session_id")
        question_id = ensure_valid(validate_identifier(question_id, "Question id"), "question_id", question_id)
        items = ensure_valid(validate_ranked_items(ranked), "ranked")

        session = await self._get_session(session_id)
        if question_id not in session.question_ids:
            raise ValidationError(
                f"Question {question_id} is not part of session {session_id}",
                field="question_id",
                value=question_id,
            )

        candidates = await self.question_bank.get_options([question_id])
        candidate_ids = {option.id for option in candidates}
        foreign = [answer_id for answer_id, _ in items if answer_id not in candidate_ids]
        if foreign:
            raise ValidationError(
                "Ranked answers must be the question's candidate answers",
                field="ranked",
                value=foreign,
            )

        await self.ranking_store.upsert_rankings(session_id, question_id, items)
        logger.info(
            "Ranking saved",
            extra={"session_id": session_id, "question_id": question_id}
        )

        rankings = await self._complete_rankings(session_id)
        catalog = await self._load_catalog(rankings)
        return self.scoring_service.aggregate(rankings, self.strategy, catalog)

    async def get_progress(self, session_id: str) -> Progress:
        session = await self._get_session(session_id)
        ranked = await self._ranked_question_ids(session.id)
        answered = len(ranked.intersection(session.question_ids))
        return Progress.from_counts(session.assigned_count, answered)

    async def get_results(self, session_id: str) -> ScoreResult:
        """Score a completed session.

        Raises:
            ResourceNotFoundError: If the session does not exist
            NoQuestionsError: If the session has no questions
            IncompleteError: If any question is unranked
        """
        progress = await self.get_progress(session_id)
        self.scoring_service.check_completion(progress)

        with PerformanceLogger("score_session", logger, {"session_id": session_id}):
            rankings = await self._complete_rankings(session_id)
            catalog = await self._load_catalog(rankings)
            result = self.scoring_service.score(rankings, self.strategy, catalog)

        logger.info(
            "Ranking session scored",
            extra={"session_id": session_id, "winner": result.winner}
        )
        return result

    # Private helper methods

    async def _get_session(self, session_id: str) -> RankingSession:
        session = await self.ranking_store.get_session(session_id)
        if session is None:
            raise ResourceNotFoundError(
                f"Ranking session {session_id} not found",
                resource_type="ranking_session",
                resource_id=session_id,
            )
        return session

    async def _complete_rankings(self, session_id: str) -> List[Ranking]:
        rankings = await self.ranking_store.list_rankings(session_id)
        return complete_rank_sets(rankings)

    async def _ranked_question_ids(self, session_id: str) -> Set[str]:
        rankings = await self._complete_rankings(session_id)
        return {ranking.question_id for ranking in rankings}

    async def _load_catalog(self, rankings: List[Ranking]) -> ScoringCatalog:
        question_ids = sorted({ranking.question_id for ranking in rankings})
        options = await self.question_bank.get_options(question_ids)
        return ScoringCatalog.build([], options)

    def _resolve_locale(self, locale: Optional[str]) -> str:
        if self.settings is not None:
            return self.settings.resolve_locale(locale)
        return (locale or DEFAULT_LOCALE).strip().lower() or DEFAULT_LOCALE
