"""Cache module for Color Quiz.

This module provides the Redis read-through cache for question bank documents.
"""

from colorquiz.cache.cache_keys import CacheKeys
from colorquiz.cache.cached_question_bank import CachedQuestionBank

__all__ = [
    "CacheKeys",
    "CachedQuestionBank",
]
