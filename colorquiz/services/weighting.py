"""Weighting strategies for the scoring engine.

A strategy turns one stored record (an attempt answer or a ranking row) into
a contribution vector over categories. The scoring engine sums contributions;
it never needs to know which kind of record produced them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from colorquiz.models.answer import Answer
from colorquiz.models.question import Option, Question
from colorquiz.models.ranking import Ranking
from colorquiz.utils.constants import RANK_POINTS, QuestionType, WeightingStrategyName
from colorquiz.utils.logger import get_scoring_logger

logger = get_scoring_logger()


@dataclass
class ScoringCatalog:
    """Question bank documents a scoring run looks up."""

    questions: Dict[str, Question] = field(default_factory=dict)
    options: Dict[str, Option] = field(default_factory=dict)

    @classmethod
    def build(cls, questions: Iterable[Question], options: Iterable[Option]) -> "ScoringCatalog":
        return cls(
            questions={question.id: question for question in questions},
            options={option.id: option for option in options},
        )


class WeightingStrategy(ABC):
    """Converts a stored record into a category contribution vector."""

    name: str

    @abstractmethod
    def contribution(self, record: Any, catalog: ScoringCatalog) -> Dict[str, float]:
        """Return the record's contribution keyed by category.

        Records that cannot be resolved contribute an empty vector.
        """


class DirectWeightStrategy(WeightingStrategy):
    """Scores attempt answers.

    A LIKERT answer adds its value to the question's category. A SINGLE_CHOICE
    answer adds the chosen option's weight vector.
    """

    name = WeightingStrategyName.DIRECT.value

    def contribution(self, record: Answer, catalog: ScoringCatalog) -> Dict[str, float]:
        if record.qtype == QuestionType.LIKERT:
            return self._likert_contribution(record, catalog)
        if record.qtype == QuestionType.SINGLE_CHOICE:
            return self._choice_contribution(record, catalog)
        return {}

    def _likert_contribution(self, answer: Answer, catalog: ScoringCatalog) -> Dict[str, float]:
        question = catalog.questions.get(answer.question_id)
        if question is None or not question.category:
            logger.warning(
                "Likert answer has no scoring category",
                extra={"attempt_id": answer.attempt_id, "question_id": answer.question_id}
            )
            return {}
        return {question.category: float(answer.likert_value or 0)}

    def _choice_contribution(self, answer: Answer, catalog: ScoringCatalog) -> Dict[str, float]:
        option = catalog.options.get(answer.option_id)
        if option is None or option.question_id != answer.question_id:
            # Unknown options never score
            logger.warning(
                "Chosen option does not belong to the question",
                extra={
                    "attempt_id": answer.attempt_id,
                    "question_id": answer.question_id,
                    "option_id": answer.option_id,
                }
            )
            return {}
        return dict(option.weights)


class RankPointStrategy(WeightingStrategy):
    """Scores ranking rows: rank points times the candidate's weight vector."""

    name = WeightingStrategyName.RANK_POINTS.value

    def __init__(self, rank_points: Optional[Dict[int, int]] = None):
        self.rank_points = dict(rank_points or RANK_POINTS)

    def contribution(self, record: Ranking, catalog: ScoringCatalog) -> Dict[str, float]:
        points = self.rank_points.get(record.rank, 0)
        option = catalog.options.get(record.answer_id)
        if option is None:
            logger.warning(
                "Ranked answer not found",
                extra={"session_id": record.session_id, "answer_id": record.answer_id}
            )
            return {}
        return {category: points * weight for category, weight in option.weights.items()}
