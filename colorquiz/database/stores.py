"""Persistence interfaces used by the quiz services.

Services depend only on these abstract stores. ``mongo_stores`` provides the
MongoDB implementations; tests substitute in-memory ones.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from colorquiz.models.answer import Answer
from colorquiz.models.attempt import Attempt
from colorquiz.models.question import Option, Question
from colorquiz.models.ranking import Ranking, RankingSession
from colorquiz.utils.constants import QuestionType


class QuestionBank(ABC):
    """Read-only access to questions and their options."""

    @abstractmethod
    async def get_questions(self, question_ids: Sequence[str]) -> List[Question]:
        """Fetch questions by id. Unknown ids are omitted from the result."""

    @abstractmethod
    async def get_options(self, question_ids: Sequence[str]) -> List[Option]:
        """Fetch the options of the given questions in storage order."""

    @abstractmethod
    async def list_active_questions(self, qtypes: Sequence[QuestionType]) -> List[Question]:
        """List every active question of the given types."""


class AttemptStore(ABC):
    """Attempts and their recorded answers."""

    @abstractmethod
    async def create_attempt(self, attempt: Attempt) -> None:
        """Insert an attempt together with its assigned questions."""

    @abstractmethod
    async def get_attempt(self, attempt_id: str) -> Optional[Attempt]:
        """Fetch an attempt, or None when unknown."""

    @abstractmethod
    async def upsert_answer(self, answer: Answer) -> None:
        """Insert or replace the answer keyed by (attempt_id, question_id)."""

    @abstractmethod
    async def list_answers(self, attempt_id: str) -> List[Answer]:
        """List every recorded answer of an attempt."""

    @abstractmethod
    async def count_answers(self, attempt_id: str) -> int:
        """Count recorded answers of an attempt."""


class OptionOrderStore(ABC):
    """Persisted option permutations keyed by (scope, question_id)."""

    @abstractmethod
    async def get_option_order(self, scope: str, question_id: str) -> Optional[List[str]]:
        """Fetch the stored permutation, or None when none exists."""

    @abstractmethod
    async def save_option_order(
        self,
        scope: str,
        question_id: str,
        option_ids: Sequence[str],
        replace: bool = False,
    ) -> List[str]:
        """Persist a permutation and return the one that is stored afterwards.

        Without ``replace`` an existing permutation wins and is returned
        unchanged, so concurrent first writers agree on one order. With
        ``replace`` the given permutation overwrites the stored one and is
        returned as written; concurrent replacements are last-writer-wins and
        each caller may get back its own permutation.
        """


class RankingStore(ABC):
    """Ranking sessions and the ranks given to each of their questions."""

    @abstractmethod
    async def create_session(self, session: RankingSession) -> None:
        """Insert a ranking session with its question list."""

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[RankingSession]:
        """Fetch a session, or None when unknown."""

    @abstractmethod
    async def upsert_rankings(
        self,
        session_id: str,
        question_id: str,
        ranked: Sequence[Tuple[str, int]],
    ) -> None:
        """Insert or replace every rank of one question in a single write.

        After a failed call the question holds either its previous ranks or
        none, never a partial set.
        """

    @abstractmethod
    async def list_rankings(self, session_id: str) -> List[Ranking]:
        """List the stored ranks of a session, one ``Ranking`` per answer."""
