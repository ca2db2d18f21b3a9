"""Unit tests for option order service."""

import pytest

from colorquiz.services.order_service import OptionOrderService
from colorquiz.services.shuffler import RandomShuffler
from quiz_fakes import InMemoryOptionOrderStore, ReverseShuffler, option


@pytest.fixture
def options():
    return [
        option("o1", "q1", 0, {"red": 1}),
        option("o2", "q1", 1, {"blue": 1}),
        option("o3", "q1", 2, {"green": 1}),
        option("o4", "q1", 3, {"yellow": 1}),
    ]


@pytest.fixture
def order_store():
    return InMemoryOptionOrderStore()


@pytest.fixture
def order_service(order_store):
    return OptionOrderService(order_store, ReverseShuffler())


def ids(options):
    return [o.id for o in options]


class TestFirstRead:
    """Generating and persisting a new order."""

    @pytest.mark.asyncio
    async def test_first_read_shuffles_and_persists(self, order_service, order_store, options):
        ordered = await order_service.get_ordered_options("attempt-1", "q1", options)

        assert ids(ordered) == ["o4", "o3", "o2", "o1"]
        assert order_store.orders[("attempt-1", "q1")] == ["o4", "o3", "o2", "o1"]

    @pytest.mark.asyncio
    async def test_no_options_returns_empty_without_writing(self, order_service, order_store):
        assert await order_service.get_ordered_options("attempt-1", "q1", []) == []
        assert order_store.writes == 0

    @pytest.mark.asyncio
    async def test_concurrent_first_writer_wins(self, order_store, options):
        """A second writer that lost the race receives the stored order."""
        order_store.orders[("attempt-1", "q1")] = ["o2", "o1", "o4", "o3"]

        class RacingStore(InMemoryOptionOrderStore):
            async def get_option_order(self, scope, question_id):
                return None

        racing = RacingStore()
        racing.orders = order_store.orders
        service = OptionOrderService(racing, ReverseShuffler())

        ordered = await service.get_ordered_options("attempt-1", "q1", options)

        assert ids(ordered) == ["o2", "o1", "o4", "o3"]


class TestStability:
    """Replaying a persisted order."""

    @pytest.mark.asyncio
    async def test_repeated_reads_return_identical_order(self, order_store, options):
        service = OptionOrderService(order_store, RandomShuffler(seed=7))

        first = await service.get_ordered_options("attempt-1", "q1", options)
        for _ in range(5):
            again = await service.get_ordered_options("attempt-1", "q1", options)
            assert ids(again) == ids(first)

        assert order_store.writes == 1

    @pytest.mark.asyncio
    async def test_scopes_are_independent(self, order_store, options):
        service = OptionOrderService(order_store, RandomShuffler(seed=3))

        await service.get_ordered_options("attempt-1", "q1", options)
        await service.get_ordered_options("attempt-2", "q1", options)

        assert set(order_store.orders) == {("attempt-1", "q1"), ("attempt-2", "q1")}

    @pytest.mark.asyncio
    async def test_input_order_does_not_change_replay(self, order_service, options):
        first = await order_service.get_ordered_options("attempt-1", "q1", options)
        replay = await order_service.get_ordered_options("attempt-1", "q1", list(reversed(options)))

        assert ids(replay) == ids(first)


class TestStaleOrders:
    """Stored orders that no longer match the option set."""

    @pytest.mark.asyncio
    async def test_length_mismatch_regenerates_and_overwrites(self, order_service, order_store, options):
        order_store.orders[("attempt-1", "q1")] = ["o1", "o2"]

        ordered = await order_service.get_ordered_options("attempt-1", "q1", options)

        assert ids(ordered) == ["o4", "o3", "o2", "o1"]
        assert order_store.orders[("attempt-1", "q1")] == ["o4", "o3", "o2", "o1"]

    @pytest.mark.asyncio
    async def test_unknown_ids_are_dropped(self, order_service, order_store, options):
        order_store.orders[("attempt-1", "q1")] = ["o3", "gone", "o1", "o2"]

        ordered = await order_service.get_ordered_options("attempt-1", "q1", options)

        assert ids(ordered) == ["o3", "o1", "o2"]

    @pytest.mark.asyncio
    async def test_nothing_resolves_falls_back_to_storage_order(self, order_service, order_store, options):
        order_store.orders[("attempt-1", "q1")] = ["x1", "x2", "x3", "x4"]

        ordered = await order_service.get_ordered_options("attempt-1", "q1", list(reversed(options)))

        assert ids(ordered) == ["o1", "o2", "o3", "o4"]
