"""Cache key definitions for Color Quiz.

Only question bank documents are cached; attempt state is always read from
MongoDB.
"""

from enum import Enum


class CacheNamespace(str, Enum):
    """Cache namespaces for different data types."""

    QUESTION = "question"
    OPTIONS = "options"


class CacheKeys:
    """Cache key generation."""

    PREFIX = "colorquiz"
    SEPARATOR = ":"

    PATTERNS = {
        "question_by_id": "{prefix}:{namespace}:{question_id}",
        "options_by_question": "{prefix}:{namespace}:{question_id}",
    }

    @classmethod
    def question_by_id(cls, question_id: str) -> str:
        """Get cache key for a question document."""
        return cls.PATTERNS["question_by_id"].format(
            prefix=cls.PREFIX,
            namespace=CacheNamespace.QUESTION.value,
            question_id=question_id,
        )

    @classmethod
    def options_by_question(cls, question_id: str) -> str:
        """Get cache key for the option list of a question."""
        return cls.PATTERNS["options_by_question"].format(
            prefix=cls.PREFIX,
            namespace=CacheNamespace.OPTIONS.value,
            question_id=question_id,
        )

    @classmethod
    def pattern(cls, namespace: CacheNamespace) -> str:
        """Get a wildcard pattern matching every key of a namespace."""
        return cls.SEPARATOR.join([cls.PREFIX, namespace.value, "*"])
