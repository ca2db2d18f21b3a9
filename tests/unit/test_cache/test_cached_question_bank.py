"""Unit tests for the read-through question bank cache."""

from typing import Any, Dict, List, Optional, Sequence

import pytest

from colorquiz.cache.cache_keys import CacheKeys, CacheNamespace
from colorquiz.cache.cached_question_bank import CachedQuestionBank
from colorquiz.utils.constants import QuestionType
from quiz_fakes import CATEGORIES, build_bank


class FakeRedis:
    """Dict-backed stand-in for ``RedisClient``'s JSON helpers."""

    def __init__(self, available: bool = True):
        self.available = available
        self.data: Dict[str, Any] = {}
        self.ttls: Dict[str, Optional[int]] = {}

    async def mget_json(self, keys: Sequence[str]) -> List[Optional[Any]]:
        if not self.available:
            return [None] * len(keys)
        return [self.data.get(key) for key in keys]

    async def set_many_json(self, items: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        if not self.available:
            return False
        for key, value in items.items():
            self.data[key] = value
            self.ttls[key] = ttl
        return True


@pytest.fixture
def inner():
    return build_bank()


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def cached_bank(inner, redis_client):
    return CachedQuestionBank(inner, redis_client, ttl=60)


class TestCacheKeys:

    def test_question_key(self):
        assert CacheKeys.question_by_id("q1") == "colorquiz:question:q1"

    def test_options_key(self):
        assert CacheKeys.options_by_question("q1") == "colorquiz:options:q1"

    def test_pattern(self):
        assert CacheKeys.pattern(CacheNamespace.OPTIONS) == "colorquiz:options:*"


class TestCachedQuestions:

    @pytest.mark.asyncio
    async def test_miss_reads_through_and_fills(self, cached_bank, inner, redis_client):
        questions = await cached_bank.get_questions(["l1", "s1"])

        assert [q.id for q in questions] == ["l1", "s1"]
        assert inner.calls == [("get_questions", ("l1", "s1"))]
        assert redis_client.data[CacheKeys.question_by_id("l1")]["category"] == "red"
        assert redis_client.ttls[CacheKeys.question_by_id("l1")] == 60

    @pytest.mark.asyncio
    async def test_hit_skips_inner_bank(self, cached_bank, inner):
        await cached_bank.get_questions(["l1", "s1"])
        inner.calls.clear()

        questions = await cached_bank.get_questions(["s1", "l1"])

        assert [q.id for q in questions] == ["s1", "l1"]
        assert questions[1].translations == {"es": "Declaracion l1"}
        assert inner.calls == []

    @pytest.mark.asyncio
    async def test_partial_hit_loads_only_missing(self, cached_bank, inner):
        await cached_bank.get_questions(["l1"])
        inner.calls.clear()

        await cached_bank.get_questions(["l1", "l2"])

        assert inner.calls == [("get_questions", ("l2",))]

    @pytest.mark.asyncio
    async def test_unknown_ids_are_omitted(self, cached_bank):
        questions = await cached_bank.get_questions(["l1", "ghost"])

        assert [q.id for q in questions] == ["l1"]

    @pytest.mark.asyncio
    async def test_redis_down_degrades_to_inner(self, inner):
        bank = CachedQuestionBank(inner, FakeRedis(available=False))

        questions = await bank.get_questions(["l1"])
        questions_again = await bank.get_questions(["l1"])

        assert questions == questions_again
        assert len(inner.calls) == 2


class TestCachedOptions:

    @pytest.mark.asyncio
    async def test_options_cached_per_question(self, cached_bank, inner, redis_client):
        options = await cached_bank.get_options(["s1"])

        assert [o.id for o in options] == [f"s1-{c}" for c in CATEGORIES]
        assert len(redis_client.data[CacheKeys.options_by_question("s1")]) == 4

    @pytest.mark.asyncio
    async def test_cached_options_keep_storage_order(self, cached_bank, inner, redis_client):
        await cached_bank.get_options(["s1"])
        key = CacheKeys.options_by_question("s1")
        redis_client.data[key] = list(reversed(redis_client.data[key]))
        inner.calls.clear()

        options = await cached_bank.get_options(["s1"])

        assert [o.id for o in options] == [f"s1-{c}" for c in CATEGORIES]
        assert inner.calls == []

    @pytest.mark.asyncio
    async def test_question_without_options_is_cached_empty(self, cached_bank, inner, redis_client):
        assert await cached_bank.get_options(["l1"]) == []
        inner.calls.clear()

        assert await cached_bank.get_options(["l1"]) == []
        assert redis_client.data[CacheKeys.options_by_question("l1")] == []
        assert inner.calls == []

    @pytest.mark.asyncio
    async def test_options_grouped_in_requested_question_order(self, cached_bank):
        await cached_bank.get_options(["s1"])

        options = await cached_bank.get_options(["s2", "s1"])

        assert [o.question_id for o in options] == ["s2"] * 4 + ["s1"] * 4

    @pytest.mark.asyncio
    async def test_weights_survive_round_trip(self, cached_bank):
        await cached_bank.get_options(["r1"])

        options = await cached_bank.get_options(["r1"])

        assert options[0].weights == {"blue": 4.0}


@pytest.mark.asyncio
async def test_active_question_listing_is_not_cached(cached_bank, redis_client):
    questions = await cached_bank.list_active_questions([QuestionType.RANKING])

    assert sorted(q.id for q in questions) == ["r1", "r2"]
    assert redis_client.data == {}
