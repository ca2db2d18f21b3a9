"""Unit tests for answer service."""

import pytest

from colorquiz.models.attempt import AssignedQuestion, Attempt
from colorquiz.services.answer_service import AnswerService
from colorquiz.utils.constants import QuestionType
from colorquiz.utils.exceptions import ResourceNotFoundError, ValidationError
from quiz_fakes import InMemoryAttemptStore


@pytest.fixture
def attempt_store():
    store = InMemoryAttemptStore()
    store.attempts["att-1"] = Attempt(
        _id="att-1",
        questions=[
            AssignedQuestion(position=1, question_id="l1", qtype=QuestionType.LIKERT),
            AssignedQuestion(position=2, question_id="s1", qtype=QuestionType.SINGLE_CHOICE),
        ],
    )
    return store


@pytest.fixture
def answer_service(attempt_store):
    return AnswerService(attempt_store)


class TestRecordAnswer:
    """Recording valid answers."""

    @pytest.mark.asyncio
    async def test_record_likert_answer(self, answer_service, attempt_store):
        answer = await answer_service.record_answer("att-1", "l1", "likert", 3)

        assert answer.qtype == QuestionType.LIKERT
        assert answer.likert_value == 3
        assert answer.option_id is None
        assert attempt_store.answers[("att-1", "l1")].likert_value == 3

    @pytest.mark.asyncio
    async def test_record_single_choice_answer(self, answer_service, attempt_store):
        answer = await answer_service.record_answer("att-1", "s1", "SINGLE", "opt-a")

        assert answer.qtype == QuestionType.SINGLE_CHOICE
        assert answer.option_id == "opt-a"
        assert answer.likert_value is None

    @pytest.mark.asyncio
    async def test_reanswer_replaces_previous_answer(self, answer_service, attempt_store):
        await answer_service.record_answer("att-1", "l1", "likert", 1)
        await answer_service.record_answer("att-1", "l1", "likert", 4)

        assert await attempt_store.count_answers("att-1") == 1
        assert attempt_store.answers[("att-1", "l1")].likert_value == 4

    @pytest.mark.asyncio
    async def test_likert_bounds_are_inclusive(self, answer_service):
        low = await answer_service.record_answer("att-1", "l1", "likert", 0)
        high = await answer_service.record_answer("att-1", "l1", "likert", 4)

        assert (low.likert_value, high.likert_value) == (0, 4)


class TestRecordAnswerValidation:
    """Rejected answers never reach the store."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [-1, 5, "3", 2.5, True, None])
    async def test_invalid_likert_value(self, answer_service, attempt_store, value):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "l1", "likert", value)

        assert exc_info.value.field == "likert_value"
        assert attempt_store.answer_writes == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["", "   ", None, 7])
    async def test_invalid_option_id(self, answer_service, attempt_store, value):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "s1", "single", value)

        assert exc_info.value.field == "option_id"
        assert attempt_store.answer_writes == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("qtype", ["ranking", "essay", "", None])
    async def test_unsupported_qtype(self, answer_service, qtype):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "l1", qtype, 2)

        assert exc_info.value.field == "qtype"

    @pytest.mark.asyncio
    async def test_blank_question_id(self, answer_service):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "  ", "likert", 2)

        assert exc_info.value.field == "question_id"

    @pytest.mark.asyncio
    async def test_unknown_attempt(self, answer_service):
        with pytest.raises(ResourceNotFoundError):
            await answer_service.record_answer("missing", "l1", "likert", 2)

    @pytest.mark.asyncio
    async def test_question_not_in_attempt(self, answer_service, attempt_store):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "other", "likert", 2)

        assert exc_info.value.field == "question_id"
        assert attempt_store.answer_writes == 0

    @pytest.mark.asyncio
    async def test_qtype_must_match_assigned_question(self, answer_service, attempt_store):
        with pytest.raises(ValidationError) as exc_info:
            await answer_service.record_answer("att-1", "l1", "single", "opt-a")

        assert exc_info.value.field == "qtype"
        assert attempt_store.answer_writes == 0
