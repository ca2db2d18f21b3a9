"""Fixtures for API integration tests.

Services are wired to in-memory stores through ``app.dependency_overrides``;
no MongoDB or Redis is needed.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from colorquiz.api.dependencies import get_attempt_service, get_ranking_service
from colorquiz.api.main import app
from colorquiz.services.answer_service import AnswerService
from colorquiz.services.attempt_service import AttemptService
from colorquiz.services.order_service import OptionOrderService
from colorquiz.services.progress_service import ProgressService
from colorquiz.services.ranking_service import RankingService
from colorquiz.services.scoring_service import ScoringService
from quiz_fakes import (
    CATEGORIES,
    IdentityShuffler,
    InMemoryAttemptStore,
    InMemoryOptionOrderStore,
    InMemoryRankingStore,
    ReverseShuffler,
    StubAllocator,
    build_bank,
)


@pytest.fixture
def question_bank():
    return build_bank()


@pytest.fixture
def attempt_store():
    return InMemoryAttemptStore()


@pytest.fixture
def ranking_store():
    return InMemoryRankingStore()


@pytest.fixture
def attempt_service(question_bank, attempt_store):
    progress_service = ProgressService(attempt_store)
    return AttemptService(
        attempt_store=attempt_store,
        question_bank=question_bank,
        allocator=StubAllocator(["l1", "s1", "l2", "s2"]),
        order_service=OptionOrderService(InMemoryOptionOrderStore(), ReverseShuffler()),
        answer_service=AnswerService(attempt_store),
        progress_service=progress_service,
        scoring_service=ScoringService(attempt_store, question_bank, progress_service, CATEGORIES),
        question_count=4,
    )


@pytest.fixture
def ranking_service(question_bank, attempt_store, ranking_store):
    return RankingService(
        ranking_store=ranking_store,
        question_bank=question_bank,
        allocator=StubAllocator(["r1", "r2"]),
        order_service=OptionOrderService(InMemoryOptionOrderStore(), IdentityShuffler()),
        scoring_service=ScoringService(
            attempt_store, question_bank, ProgressService(attempt_store), CATEGORIES
        ),
        question_count=2,
    )


@pytest.fixture
def api_app(attempt_service, ranking_service):
    app.dependency_overrides[get_attempt_service] = lambda: attempt_service
    app.dependency_overrides[get_ranking_service] = lambda: ranking_service
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(api_app):
    async with AsyncClient(transport=ASGITransport(app=api_app), base_url="http://test") as http_client:
        yield http_client
