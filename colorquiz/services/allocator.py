"""Question allocation.

An allocator picks the battery of question ids for a new attempt or ranking
session. The lifecycle services only rely on the ``QuestionAllocator``
interface and verify what it returns.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from colorquiz.database.stores import QuestionBank
from colorquiz.models.question import Question
from colorquiz.services.shuffler import Shuffler
from colorquiz.utils.constants import QuestionType
from colorquiz.utils.logger import get_business_logger

logger = get_business_logger()


class QuestionAllocator(ABC):
    """Chooses the questions assigned to a scope."""

    @abstractmethod
    async def allocate(
        self,
        scope_id: str,
        count: int,
        qtypes: Sequence[QuestionType],
    ) -> List[str]:
        """Return up to ``count`` distinct question ids of the given types."""


class BalancedQuestionAllocator(QuestionAllocator):
    """Spreads the battery evenly across question types and categories.

    Active questions are grouped by ``(qtype, category)``, each group is
    shuffled, and groups are drawn from round-robin until ``count`` ids are
    taken. A bank smaller than ``count`` yields a short list.
    """

    def __init__(self, question_bank: QuestionBank, shuffler: Shuffler):
        self.question_bank = question_bank
        self.shuffler = shuffler

    async def allocate(
        self,
        scope_id: str,
        count: int,
        qtypes: Sequence[QuestionType],
    ) -> List[str]:
        questions = await self.question_bank.list_active_questions(qtypes)
        groups = self._group(questions)

        pools = [self.shuffler.shuffle(groups[key]) for key in sorted(groups)]
        selected: List[str] = []
        while len(selected) < count and any(pools):
            for pool in pools:
                if pool and len(selected) < count:
                    selected.append(pool.pop())

        if len(selected) < count:
            logger.warning(
                "Question bank too small for requested battery",
                extra={"scope_id": scope_id, "requested": count, "available": len(selected)}
            )
        return selected

    def _group(self, questions: Sequence[Question]) -> Dict[Tuple[str, str], List[str]]:
        groups: Dict[Tuple[str, str], List[str]] = defaultdict(list)
        seen = set()
        for question in questions:
            if question.id in seen:
                continue
            seen.add(question.id)
            groups[(str(question.qtype), question.category or "")].append(question.id)
        return groups
