"""Scoring service for the color quiz.

This service aggregates stored answers into per-category totals and selects
the winning category. It performs no writes: finishing an attempt twice, or
querying results long after finishing, recomputes the same result from the
same answers.
"""

from typing import Dict, Iterable, List, Sequence

from colorquiz.database.stores import AttemptStore, QuestionBank
from colorquiz.models.answer import Answer
from colorquiz.models.score import CategoryScore, Progress, ScoreResult
from colorquiz.services.progress_service import ProgressService
from colorquiz.services.weighting import (
    DirectWeightStrategy,
    ScoringCatalog,
    WeightingStrategy,
)
from colorquiz.utils.constants import QuestionType
from colorquiz.utils.exceptions import IncompleteError, NoQuestionsError
from colorquiz.utils.logger import PerformanceLogger, get_scoring_logger

logger = get_scoring_logger()


class ScoringService:
    """Service for category scoring of attempts and ranking sessions."""

    def __init__(
        self,
        attempt_store: AttemptStore,
        question_bank: QuestionBank,
        progress_service: ProgressService,
        categories: Sequence[str],
    ):
        """Initialize scoring service.

        Args:
            attempt_store: Store holding attempts and answers
            question_bank: Source of question categories and option weights
            progress_service: Completion gate
            categories: Configured category keys in display order
        """
        self.attempt_store = attempt_store
        self.question_bank = question_bank
        self.progress_service = progress_service
        self.categories = list(categories)
        self.direct_strategy = DirectWeightStrategy()

    async def finish(self, attempt_id: str) -> ScoreResult:
        """Finish an attempt and return its score.

        Calling this repeatedly is safe and returns equal results while the
        answers are unchanged.

        Args:
            attempt_id: Attempt to score

        Returns:
            ScoreResult: Category totals and winner

        Raises:
            ResourceNotFoundError: If the attempt does not exist
            NoQuestionsError: If the attempt has no assigned questions
            IncompleteError: If any assigned question is unanswered
            StoreFailure: If reading answers or the question bank fails
        """
        result = await self.get_results(attempt_id)
        logger.info(
            "Attempt finished",
            extra={"attempt_id": attempt_id, "winner": result.winner}
        )
        return result

    async def get_results(self, attempt_id: str) -> ScoreResult:
        """Recompute an attempt's score from its stored answers.

        Args:
            attempt_id: Attempt to score

        Returns:
            ScoreResult: Category totals and winner
        """
        progress = await self.progress_service.get_progress(attempt_id)
        self.check_completion(progress)

        with PerformanceLogger("score_attempt", logger, {"attempt_id": attempt_id}):
            answers = await self.attempt_store.list_answers(attempt_id)
            catalog = await self._load_catalog(answers)
            return self.score(answers, self.direct_strategy, catalog)

    def check_completion(self, progress: Progress) -> None:
        """Gate scoring on completion.

        Args:
            progress: Current progress

        Raises:
            NoQuestionsError: If nothing is assigned
            IncompleteError: If answers are missing
        """
        if progress.assigned == 0:
            raise NoQuestionsError()
        if not progress.is_complete:
            raise IncompleteError(assigned=progress.assigned, answered=progress.answered)

    def score(
        self,
        records: Iterable,
        strategy: WeightingStrategy,
        catalog: ScoringCatalog,
    ) -> ScoreResult:
        """Aggregate records into category totals.

        Totals start at zero for every configured category. Contributions to
        categories outside the configured set are ignored.

        Args:
            records: Answers or ranking rows
            strategy: Weighting strategy matching the record type
            catalog: Question bank documents referenced by the records

        Returns:
            ScoreResult: Totals in configured order and the winner
        """
        totals = self.aggregate(records, strategy, catalog)
        return ScoreResult(
            results=[
                CategoryScore(category=category, total_score=totals[category])
                for category in self.categories
            ],
            winner=self.select_winner(totals),
            strategy=strategy.name,
        )

    def aggregate(
        self,
        records: Iterable,
        strategy: WeightingStrategy,
        catalog: ScoringCatalog,
    ) -> Dict[str, float]:
        totals = {category: 0.0 for category in self.categories}
        for record in records:
            for category, amount in strategy.contribution(record, catalog).items():
                if category in totals:
                    totals[category] += amount
                else:
                    logger.debug(f"Ignoring contribution to unconfigured category {category}")
        return totals

    @staticmethod
    def select_winner(totals: Dict[str, float]) -> str:
        """Pick the category with the highest total.

        Ties go to the alphabetically first category key among those sharing
        the maximum, so an all-zero vector also has a defined winner.

        Args:
            totals: Total per category

        Returns:
            str: Winning category key
        """
        best = max(totals.values())
        return min(category for category, total in totals.items() if total == best)

    # Private helper methods

    async def _load_catalog(self, answers: List[Answer]) -> ScoringCatalog:
        question_ids = [answer.question_id for answer in answers]
        choice_ids = [
            answer.question_id for answer in answers
            if answer.qtype == QuestionType.SINGLE_CHOICE
        ]
        questions = await self.question_bank.get_questions(question_ids)
        options = await self.question_bank.get_options(choice_ids)
        return ScoringCatalog.build(questions, options)
