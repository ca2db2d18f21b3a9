"""Unit tests for the MongoDB connection manager."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import OperationFailure

from colorquiz.database.mongodb import INDEX_SPECS, MongoDB


def connected_mongodb(collection):
    mongodb = MongoDB("mongodb://localhost:27017", "colorquiz_test")
    database = MagicMock()
    database.__getitem__.return_value = collection
    mongodb._database = database
    return mongodb


class TestMongoDB:

    def test_not_connected(self):
        mongodb = MongoDB("mongodb://localhost:27017", "colorquiz_test")

        assert mongodb.is_connected is False
        with pytest.raises(RuntimeError):
            mongodb.database

    @pytest.mark.asyncio
    async def test_ping_without_client(self):
        assert await MongoDB("mongodb://localhost:27017", "x").ping() is False

    @pytest.mark.asyncio
    async def test_create_indexes(self):
        collection = MagicMock()
        collection.create_index = AsyncMock(return_value="idx")
        mongodb = connected_mongodb(collection)

        created = await mongodb.create_indexes()

        assert created == sum(len(specs) for _, specs in INDEX_SPECS)

    @pytest.mark.asyncio
    async def test_failed_plain_index_is_skipped(self):
        collection = MagicMock()
        collection.create_index = AsyncMock(side_effect=[OperationFailure("conflict")] + ["idx"] * 20)
        mongodb = connected_mongodb(collection)

        created = await mongodb.create_indexes()

        assert created == sum(len(specs) for _, specs in INDEX_SPECS) - 1

    @pytest.mark.asyncio
    async def test_failed_unique_index_is_fatal(self):
        async def create_index(keys, **options):
            if options.get("unique"):
                raise OperationFailure("existing duplicates")
            return "idx"

        collection = MagicMock()
        collection.create_index = AsyncMock(side_effect=create_index)
        mongodb = connected_mongodb(collection)

        with pytest.raises(OperationFailure):
            await mongodb.create_indexes()

    def test_unique_indexes_back_the_upserts(self):
        specs = dict(INDEX_SPECS)

        assert ([("attempt_id", 1), ("question_id", 1)], {"unique": True}) in specs["attempt_answers"]
        assert ([("scope", 1), ("question_id", 1)], {"unique": True}) in specs["option_orders"]
        assert ([("session_id", 1), ("question_id", 1)], {"unique": True}) in specs["session_rankings"]
