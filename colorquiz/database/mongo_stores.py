"""MongoDB implementations of the store interfaces.

Every write is a single-document upsert against a unique index; there are no
multi-document transactions. Driver errors are translated into
``StoreFailure``.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from colorquiz.database.stores import (
    AttemptStore,
    OptionOrderStore,
    QuestionBank,
    RankingStore,
)
from colorquiz.models.answer import Answer
from colorquiz.models.attempt import Attempt
from colorquiz.models.base import new_object_id
from colorquiz.models.question import Option, Question
from colorquiz.models.ranking import QuestionRanking, Ranking, RankingSession
from colorquiz.utils.constants import Collections, QuestionType
from colorquiz.utils.datetime_utils import utc_now
from colorquiz.utils.exceptions import StoreFailure
from colorquiz.utils.logger import get_database_logger

logger = get_database_logger()


@contextmanager
def store_operation(operation: str, collection: str) -> Iterator[None]:
    """Translate driver errors raised inside the block into ``StoreFailure``.

    Args:
        operation: Operation name for the error details
        collection: Collection name for the error details
    """
    try:
        yield
    except PyMongoError as e:
        logger.error(
            f"MongoDB {operation} on {collection} failed: {str(e)}",
            extra={"database_operation": operation, "collection": collection},
        )
        raise StoreFailure(
            f"Storage operation failed: {operation}",
            operation=operation,
            collection=collection,
            cause=e,
        ) from e


class MongoQuestionBank(QuestionBank):
    """Question bank backed by the ``questions`` and ``question_options`` collections."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.questions = database[Collections.QUESTIONS]
        self.options = database[Collections.QUESTION_OPTIONS]

    async def get_questions(self, question_ids: Sequence[str]) -> List[Question]:
        if not question_ids:
            return []
        with store_operation("find", Collections.QUESTIONS):
            docs = await self.questions.find({"_id": {"$in": list(question_ids)}}).to_list(length=None)
        return [Question.from_dict(doc) for doc in docs]

    async def get_options(self, question_ids: Sequence[str]) -> List[Option]:
        if not question_ids:
            return []
        with store_operation("find", Collections.QUESTION_OPTIONS):
            cursor = self.options.find({"question_id": {"$in": list(question_ids)}})
            docs = await cursor.sort([("sort_order", ASCENDING), ("_id", ASCENDING)]).to_list(length=None)
        return [Option.from_dict(doc) for doc in docs]

    async def list_active_questions(self, qtypes: Sequence[QuestionType]) -> List[Question]:
        query = {
            "qtype": {"$in": [QuestionType(qtype).value for qtype in qtypes]},
            "is_active": True,
        }
        with store_operation("find", Collections.QUESTIONS):
            docs = await self.questions.find(query).sort("_id", ASCENDING).to_list(length=None)
        return [Question.from_dict(doc) for doc in docs]


class MongoAttemptStore(AttemptStore):
    """Attempts with embedded question batteries, answers in their own collection."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.attempts = database[Collections.ATTEMPTS]
        self.answers = database[Collections.ATTEMPT_ANSWERS]

    async def create_attempt(self, attempt: Attempt) -> None:
        with store_operation("insert", Collections.ATTEMPTS):
            await self.attempts.insert_one(attempt.to_dict())

    async def get_attempt(self, attempt_id: str) -> Optional[Attempt]:
        with store_operation("find", Collections.ATTEMPTS):
            doc = await self.attempts.find_one({"_id": attempt_id})
        return Attempt.from_dict(doc) if doc else None

    async def upsert_answer(self, answer: Answer) -> None:
        now = utc_now()
        with store_operation("upsert", Collections.ATTEMPT_ANSWERS):
            await self.answers.update_one(
                {"attempt_id": answer.attempt_id, "question_id": answer.question_id},
                {
                    "$set": {
                        "qtype": answer.qtype,
                        "likert_value": answer.likert_value,
                        "option_id": answer.option_id,
                        "updated_at": now,
                    },
                    "$setOnInsert": {
                        "_id": answer.id,
                        "created_at": now,
                    },
                },
                upsert=True,
            )

    async def list_answers(self, attempt_id: str) -> List[Answer]:
        with store_operation("find", Collections.ATTEMPT_ANSWERS):
            docs = await self.answers.find({"attempt_id": attempt_id}).to_list(length=None)
        return [Answer.from_dict(doc) for doc in docs]

    async def count_answers(self, attempt_id: str) -> int:
        with store_operation("count", Collections.ATTEMPT_ANSWERS):
            return await self.answers.count_documents({"attempt_id": attempt_id})


class MongoOptionOrderStore(OptionOrderStore):
    """Option permutations keyed by the unique ``(scope, question_id)`` index."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.orders = database[Collections.OPTION_ORDERS]

    async def get_option_order(self, scope: str, question_id: str) -> Optional[List[str]]:
        with store_operation("find", Collections.OPTION_ORDERS):
            doc = await self.orders.find_one({"scope": scope, "question_id": question_id})
        return list(doc["option_ids"]) if doc else None

    async def save_option_order(
        self,
        scope: str,
        question_id: str,
        option_ids: Sequence[str],
        replace: bool = False,
    ) -> List[str]:
        key = {"scope": scope, "question_id": question_id}
        now = utc_now()
        if replace:
            update = {
                "$set": {"option_ids": list(option_ids), "created_at": now},
                "$setOnInsert": {"_id": new_object_id()},
            }
        else:
            # First writer wins; later writers read back the stored permutation
            update = {
                "$setOnInsert": {
                    "_id": new_object_id(),
                    "option_ids": list(option_ids),
                    "created_at": now,
                },
            }

        with store_operation("upsert", Collections.OPTION_ORDERS):
            try:
                doc = await self.orders.find_one_and_update(
                    key,
                    update,
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError:
                # Lost an insert race on the unique index
                logger.debug(
                    "Option order insert raced, reading winner",
                    extra={"scope": scope, "question_id": question_id},
                )
                doc = await self.orders.find_one(key)

        return list(doc["option_ids"]) if doc else list(option_ids)


class MongoRankingStore(RankingStore):
    """Ranking sessions and one rank document per (session_id, question_id)."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.sessions = database[Collections.RANKING_SESSIONS]
        self.rankings = database[Collections.SESSION_RANKINGS]

    async def create_session(self, session: RankingSession) -> None:
        with store_operation("insert", Collections.RANKING_SESSIONS):
            await self.sessions.insert_one(session.to_dict())

    async def get_session(self, session_id: str) -> Optional[RankingSession]:
        with store_operation("find", Collections.RANKING_SESSIONS):
            doc = await self.sessions.find_one({"_id": session_id})
        return RankingSession.from_dict(doc) if doc else None

    async def upsert_rankings(
        self,
        session_id: str,
        question_id: str,
        ranked: Sequence[Tuple[str, int]],
    ) -> None:
        now = utc_now()
        ranks = [{"answer_id": answer_id, "rank": rank} for answer_id, rank in ranked]
        # All ranks of the question go in one document write
        with store_operation("upsert", Collections.SESSION_RANKINGS):
            await self.rankings.update_one(
                {"session_id": session_id, "question_id": question_id},
                {
                    "$set": {"ranks": ranks, "updated_at": now},
                    "$setOnInsert": {"_id": new_object_id(), "created_at": now},
                },
                upsert=True,
            )

    async def list_rankings(self, session_id: str) -> List[Ranking]:
        with store_operation("find", Collections.SESSION_RANKINGS):
            docs = await self.rankings.find({"session_id": session_id}).to_list(length=None)
        return [row for doc in docs for row in QuestionRanking.from_dict(doc).rows()]
