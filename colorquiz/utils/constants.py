"""Constants and enums for the Color Quiz application."""

from enum import Enum
from typing import Dict, Tuple


# ============================================================================
# CORE ENUMS
# ============================================================================

class QuestionType(str, Enum):
    """Question types understood by the quiz engine."""

    LIKERT = "likert"
    SINGLE_CHOICE = "single"
    RANKING = "ranking"

    @classmethod
    def parse(cls, value: str) -> "QuestionType":
        """Parse a client-supplied question type.

        Args:
            value: Raw value, case-insensitive

        Returns:
            QuestionType: Matching member

        Raises:
            ValueError: If the value names no question type
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown question type: {value!r}")
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown question type: {value}")


class AttemptStatus(str, Enum):
    """Observable states of an attempt or ranking session.

    CREATED is never persisted on its own: an attempt is written together with
    its assigned questions.
    """

    CREATED = "created"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class WeightingStrategyName(str, Enum):
    """Names of the scoring engine's weighting strategies."""

    DIRECT = "direct_weight"
    RANK_POINTS = "rank_points"


# ============================================================================
# QUIZ CONSTANTS
# ============================================================================

# Question types an attempt battery may contain
ATTEMPT_QUESTION_TYPES: Tuple[QuestionType, ...] = (
    QuestionType.LIKERT,
    QuestionType.SINGLE_CHOICE,
)

LIKERT_MIN_VALUE = 0
LIKERT_MAX_VALUE = 4

# Every ranking question is ranked over exactly this many candidate answers
RANKING_ANSWER_COUNT = 4

# Points awarded per rank position; rank 4 contributes nothing
RANK_POINTS: Dict[int, int] = {1: 3, 2: 2, 3: 1, 4: 0}

DEFAULT_CATEGORIES: Tuple[str, ...] = ("red", "blue", "yellow", "green")

DEFAULT_LOCALE = "en"


# ============================================================================
# COLLECTION NAMES
# ============================================================================

class Collections:
    """MongoDB collection names."""

    QUESTIONS = "questions"
    QUESTION_OPTIONS = "question_options"
    ATTEMPTS = "attempts"
    ATTEMPT_ANSWERS = "attempt_answers"
    OPTION_ORDERS = "option_orders"
    RANKING_SESSIONS = "ranking_sessions"
    SESSION_RANKINGS = "session_rankings"
