"""Common dependencies for FastAPI routes.

Connection managers live on ``app.state`` (see ``colorquiz.core.events``).
Everything else is assembled per request from them, so tests can replace any
layer through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from colorquiz.cache.cached_question_bank import CachedQuestionBank
from colorquiz.core.config import Settings
from colorquiz.core.config import get_settings as load_settings
from colorquiz.database.mongo_stores import (
    MongoAttemptStore,
    MongoOptionOrderStore,
    MongoQuestionBank,
    MongoRankingStore,
)
from colorquiz.database.mongodb import MongoDB
from colorquiz.database.redis_client import RedisClient
from colorquiz.database.stores import AttemptStore, OptionOrderStore, QuestionBank, RankingStore
from colorquiz.services.allocator import BalancedQuestionAllocator, QuestionAllocator
from colorquiz.services.answer_service import AnswerService
from colorquiz.services.attempt_service import AttemptService
from colorquiz.services.order_service import OptionOrderService
from colorquiz.services.progress_service import ProgressService
from colorquiz.services.ranking_service import RankingService
from colorquiz.services.scoring_service import ScoringService
from colorquiz.services.shuffler import RandomShuffler, Shuffler
from colorquiz.utils.logger import get_api_logger

logger = get_api_logger()


def get_settings() -> Settings:
    return load_settings()


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


# Connection dependencies
def get_mongodb(request: Request) -> MongoDB:
    """Get the MongoDB manager created at startup.

    Raises:
        HTTPException: 503 if the database is not connected
    """
    mongodb: Optional[MongoDB] = getattr(request.app.state, "mongodb", None)
    if mongodb is None or not mongodb.is_connected:
        logger.error("Database connection unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection unavailable"
        )
    return mongodb


def get_db(mongodb: MongoDB = Depends(get_mongodb)) -> AsyncIOMotorDatabase:
    return mongodb.database


def get_redis(request: Request) -> Optional[RedisClient]:
    """Get the Redis client, or None when caching is off or unavailable."""
    redis_client: Optional[RedisClient] = getattr(request.app.state, "redis", None)
    if redis_client is None or not redis_client.is_connected:
        return None
    return redis_client


# Store dependencies
def get_question_bank(
    db: AsyncIOMotorDatabase = Depends(get_db),
    redis_client: Optional[RedisClient] = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> QuestionBank:
    bank = MongoQuestionBank(db)
    if settings.ENABLE_CACHE and redis_client is not None:
        return CachedQuestionBank(bank, redis_client, ttl=settings.QUESTION_CACHE_TTL_SECONDS)
    return bank


def get_attempt_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> AttemptStore:
    return MongoAttemptStore(db)


def get_order_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> OptionOrderStore:
    return MongoOptionOrderStore(db)


def get_ranking_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> RankingStore:
    return MongoRankingStore(db)


# Service dependencies
def get_shuffler() -> Shuffler:
    return RandomShuffler()


def get_allocator(
    question_bank: QuestionBank = Depends(get_question_bank),
    shuffler: Shuffler = Depends(get_shuffler),
) -> QuestionAllocator:
    return BalancedQuestionAllocator(question_bank, shuffler)


def get_order_service(
    order_store: OptionOrderStore = Depends(get_order_store),
    shuffler: Shuffler = Depends(get_shuffler),
) -> OptionOrderService:
    return OptionOrderService(order_store, shuffler)


def get_scoring_service(
    attempt_store: AttemptStore = Depends(get_attempt_store),
    question_bank: QuestionBank = Depends(get_question_bank),
    settings: Settings = Depends(get_settings),
) -> ScoringService:
    return ScoringService(
        attempt_store,
        question_bank,
        ProgressService(attempt_store),
        settings.QUIZ_CATEGORIES,
    )


def get_attempt_service(
    attempt_store: AttemptStore = Depends(get_attempt_store),
    question_bank: QuestionBank = Depends(get_question_bank),
    allocator: QuestionAllocator = Depends(get_allocator),
    order_service: OptionOrderService = Depends(get_order_service),
    scoring_service: ScoringService = Depends(get_scoring_service),
    settings: Settings = Depends(get_settings),
) -> AttemptService:
    """Assemble the attempt lifecycle service for one request."""
    return AttemptService(
        attempt_store=attempt_store,
        question_bank=question_bank,
        allocator=allocator,
        order_service=order_service,
        answer_service=AnswerService(attempt_store),
        progress_service=scoring_service.progress_service,
        scoring_service=scoring_service,
        question_count=settings.QUIZ_QUESTION_COUNT,
        settings=settings,
    )


def get_ranking_service(
    ranking_store: RankingStore = Depends(get_ranking_store),
    question_bank: QuestionBank = Depends(get_question_bank),
    allocator: QuestionAllocator = Depends(get_allocator),
    order_service: OptionOrderService = Depends(get_order_service),
    scoring_service: ScoringService = Depends(get_scoring_service),
    settings: Settings = Depends(get_settings),
) -> RankingService:
    """Assemble the ranking session service for one request."""
    return RankingService(
        ranking_store=ranking_store,
        question_bank=question_bank,
        allocator=allocator,
        order_service=order_service,
        scoring_service=scoring_service,
        question_count=settings.RANKING_QUESTION_COUNT,
        settings=settings,
    )
