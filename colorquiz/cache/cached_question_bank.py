"""Read-through Redis cache in front of the question bank.

The bank is read-only to the quiz engine, so cached documents only expire by
TTL. A Redis outage degrades to reading MongoDB directly.
"""

from typing import Dict, List, Optional, Sequence

from colorquiz.cache.cache_keys import CacheKeys
from colorquiz.database.redis_client import RedisClient
from colorquiz.database.stores import QuestionBank
from colorquiz.models.question import Option, Question, storage_order
from colorquiz.utils.constants import QuestionType
from colorquiz.utils.logger import get_cache_logger

logger = get_cache_logger()


class CachedQuestionBank(QuestionBank):
    """Question bank decorator caching questions and option lists."""

    def __init__(self, inner: QuestionBank, redis_client: RedisClient, ttl: Optional[int] = 3600):
        """Initialize the cached bank.

        Args:
            inner: Bank the cache reads through to
            redis_client: Connected Redis client
            ttl: Time to live of cached documents in seconds
        """
        self.inner = inner
        self.redis = redis_client
        self.ttl = ttl

    async def get_questions(self, question_ids: Sequence[str]) -> List[Question]:
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            return []

        keys = [CacheKeys.question_by_id(question_id) for question_id in ids]
        cached = await self.redis.mget_json(keys)

        found: Dict[str, Question] = {}
        for question_id, data in zip(ids, cached):
            if data is not None:
                found[question_id] = Question.from_dict(data)

        missing = [question_id for question_id in ids if question_id not in found]
        if missing:
            loaded = await self.inner.get_questions(missing)
            await self.redis.set_many_json(
                {CacheKeys.question_by_id(q.id): q.to_dict(mode="json") for q in loaded},
                self.ttl,
            )
            found.update({question.id: question for question in loaded})

        logger.debug(
            "Question cache lookup",
            extra={"requested": len(ids), "hits": len(ids) - len(missing)}
        )
        return [found[question_id] for question_id in ids if question_id in found]

    async def get_options(self, question_ids: Sequence[str]) -> List[Option]:
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            return []

        keys = [CacheKeys.options_by_question(question_id) for question_id in ids]
        cached = await self.redis.mget_json(keys)

        by_question: Dict[str, List[Option]] = {}
        for question_id, data in zip(ids, cached):
            if data is not None:
                by_question[question_id] = [Option.from_dict(item) for item in data]

        missing = [question_id for question_id in ids if question_id not in by_question]
        if missing:
            loaded = await self.inner.get_options(missing)
            grouped: Dict[str, List[Option]] = {question_id: [] for question_id in missing}
            for option in loaded:
                grouped.setdefault(option.question_id, []).append(option)

            await self.redis.set_many_json(
                {
                    CacheKeys.options_by_question(question_id): [
                        option.to_dict(mode="json") for option in options
                    ]
                    for question_id, options in grouped.items()
                },
                self.ttl,
            )
            by_question.update(grouped)

        options: List[Option] = []
        for question_id in ids:
            options.extend(storage_order(by_question.get(question_id, [])))
        return options

    async def list_active_questions(self, qtypes: Sequence[QuestionType]) -> List[Question]:
        return await self.inner.list_active_questions(qtypes)
