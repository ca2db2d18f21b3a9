"""Unit tests for question allocation and shufflers."""

from collections import Counter

import pytest

from colorquiz.services.allocator import BalancedQuestionAllocator
from colorquiz.services.shuffler import RandomShuffler
from colorquiz.utils.constants import ATTEMPT_QUESTION_TYPES, QuestionType
from quiz_fakes import IdentityShuffler, InMemoryQuestionBank, likert, ranking, single


@pytest.fixture
def question_bank():
    questions = []
    for category in ("red", "blue", "yellow", "green"):
        questions.extend(likert(f"{category}-{i}", category) for i in range(5))
    questions.extend(single(f"s-{i}") for i in range(6))
    questions.extend(ranking(f"r-{i}") for i in range(3))
    inactive = likert("red-retired", "red")
    inactive.is_active = False
    questions.append(inactive)
    return InMemoryQuestionBank(questions)


class TestBalancedQuestionAllocator:

    @pytest.mark.asyncio
    async def test_returns_requested_count_of_distinct_ids(self, question_bank):
        allocator = BalancedQuestionAllocator(question_bank, RandomShuffler(seed=1))

        selected = await allocator.allocate("scope", 12, ATTEMPT_QUESTION_TYPES)

        assert len(selected) == 12
        assert len(set(selected)) == 12

    @pytest.mark.asyncio
    async def test_spreads_across_categories(self, question_bank):
        allocator = BalancedQuestionAllocator(question_bank, IdentityShuffler())

        selected = await allocator.allocate("scope", 10, ATTEMPT_QUESTION_TYPES)

        groups = Counter(
            question_bank.questions[qid].category or question_bank.questions[qid].qtype
            for qid in selected
        )
        assert groups == {"red": 2, "blue": 2, "yellow": 2, "green": 2, "single": 2}

    @pytest.mark.asyncio
    async def test_filters_types_and_inactive_questions(self, question_bank):
        allocator = BalancedQuestionAllocator(question_bank, RandomShuffler(seed=2))

        selected = await allocator.allocate("scope", 100, [QuestionType.RANKING])

        assert sorted(selected) == ["r-0", "r-1", "r-2"]

    @pytest.mark.asyncio
    async def test_small_bank_yields_short_list(self, question_bank):
        allocator = BalancedQuestionAllocator(question_bank, RandomShuffler(seed=3))

        selected = await allocator.allocate("scope", 100, ATTEMPT_QUESTION_TYPES)

        assert len(selected) == 26
        assert "red-retired" not in selected


class TestRandomShuffler:

    def test_is_a_permutation(self):
        items = list(range(20))

        shuffled = RandomShuffler(seed=5).shuffle(items)

        assert sorted(shuffled) == items
        assert items == list(range(20))

    def test_seed_is_reproducible(self):
        assert RandomShuffler(seed=9).shuffle("abcdefgh") == RandomShuffler(seed=9).shuffle("abcdefgh")

    def test_fresh_scopes_can_differ(self):
        shuffler = RandomShuffler(seed=4)
        orders = {tuple(shuffler.shuffle(range(8))) for _ in range(10)}

        assert len(orders) > 1
