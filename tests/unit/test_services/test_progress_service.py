"""Unit tests for progress service."""

import pytest

from colorquiz.models.answer import Answer
from colorquiz.models.attempt import AssignedQuestion, Attempt
from colorquiz.models.score import Progress
from colorquiz.services.progress_service import ProgressService
from colorquiz.utils.constants import AttemptStatus, QuestionType
from colorquiz.utils.exceptions import ResourceNotFoundError
from quiz_fakes import InMemoryAttemptStore


@pytest.fixture
def attempt_store():
    store = InMemoryAttemptStore()
    store.attempts["att-1"] = Attempt(
        _id="att-1",
        questions=[
            AssignedQuestion(position=i, question_id=f"q{i}", qtype=QuestionType.LIKERT)
            for i in range(1, 4)
        ],
    )
    return store


@pytest.fixture
def progress_service(attempt_store):
    return ProgressService(attempt_store)


class TestGetProgress:

    @pytest.mark.asyncio
    async def test_fresh_attempt(self, progress_service):
        progress = await progress_service.get_progress("att-1")

        assert (progress.assigned, progress.answered, progress.remaining) == (3, 0, 3)
        assert progress.is_complete is False
        assert progress.status == AttemptStatus.ASSIGNED

    @pytest.mark.asyncio
    async def test_partially_answered(self, progress_service, attempt_store):
        await attempt_store.upsert_answer(
            Answer(attempt_id="att-1", question_id="q1", qtype=QuestionType.LIKERT, likert_value=1)
        )

        progress = await progress_service.get_progress("att-1")

        assert progress.remaining == 2
        assert progress.status == AttemptStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_reanswering_counts_once(self, progress_service, attempt_store):
        for value in (1, 2, 3):
            await attempt_store.upsert_answer(
                Answer(attempt_id="att-1", question_id="q1", qtype=QuestionType.LIKERT, likert_value=value)
            )

        progress = await progress_service.get_progress("att-1")

        assert progress.answered == 1

    @pytest.mark.asyncio
    async def test_complete(self, progress_service, attempt_store):
        for i in range(1, 4):
            await attempt_store.upsert_answer(
                Answer(attempt_id="att-1", question_id=f"q{i}", qtype=QuestionType.LIKERT, likert_value=0)
            )

        progress = await progress_service.get_progress("att-1")

        assert progress.is_complete is True
        assert progress.remaining == 0
        assert progress.status == AttemptStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_unknown_attempt(self, progress_service):
        with pytest.raises(ResourceNotFoundError):
            await progress_service.get_progress("missing")


class TestProgressModel:

    def test_zero_assigned_is_never_complete(self):
        progress = Progress.from_counts(0, 0)

        assert progress.is_complete is False
        assert progress.remaining == 0

    def test_remaining_never_negative(self):
        assert Progress.from_counts(2, 5).remaining == 0
