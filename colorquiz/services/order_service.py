"""Option order service.

Each scope (an attempt or a ranking session) sees the options of a question in
its own random order. The order is generated once, persisted, and replayed on
every later read, so reloading the page never reshuffles.
"""

from typing import Dict, List, Sequence

from colorquiz.database.stores import OptionOrderStore
from colorquiz.models.question import Option, storage_order
from colorquiz.services.shuffler import Shuffler
from colorquiz.utils.logger import get_business_logger

logger = get_business_logger()


class OptionOrderService:
    """Service for the shuffle-once-and-persist option ordering."""

    def __init__(self, order_store: OptionOrderStore, shuffler: Shuffler):
        """Initialize option order service.

        Args:
            order_store: Store for persisted permutations
            shuffler: Permutation source for new orders
        """
        self.order_store = order_store
        self.shuffler = shuffler

    async def get_ordered_options(
        self,
        scope: str,
        question_id: str,
        options: Sequence[Option],
    ) -> List[Option]:
        """Return a question's options in the scope's persisted order.

        A stored permutation is replayed when its length still equals the
        number of options; ids that no longer resolve are dropped. Otherwise a
        new permutation is shuffled and persisted. When two callers race to
        create the first permutation, both receive the one that was stored.

        Args:
            scope: Attempt id or ranking session id
            question_id: Question whose options are ordered
            options: All options of the question, in storage order

        Returns:
            List[Option]: Options in display order

        Raises:
            StoreFailure: If the permutation cannot be read or written
        """
        if not options:
            return []

        by_id: Dict[str, Option] = {option.id: option for option in options}
        stored = await self.order_store.get_option_order(scope, question_id)

        if stored is not None and len(stored) == len(options):
            ordered = self._resolve(stored, by_id)
            if ordered:
                return ordered
            return self._fallback(scope, question_id, options)

        if stored is not None:
            logger.info(
                "Option set changed, regenerating order",
                extra={
                    "scope": scope,
                    "question_id": question_id,
                    "stored_count": len(stored),
                    "option_count": len(options),
                }
            )

        shuffled = self.shuffler.shuffle([option.id for option in options])
        persisted = await self.order_store.save_option_order(
            scope,
            question_id,
            shuffled,
            replace=stored is not None,
        )

        ordered = self._resolve(persisted, by_id)
        if ordered:
            return ordered
        return self._fallback(scope, question_id, options)

    # Private helper methods

    def _resolve(self, option_ids: Sequence[str], by_id: Dict[str, Option]) -> List[Option]:
        return [by_id[option_id] for option_id in option_ids if option_id in by_id]

    def _fallback(self, scope: str, question_id: str, options: Sequence[Option]) -> List[Option]:
        """Storage order, used when a stored permutation resolves to nothing."""
        logger.warning(
            "Stored option order matches no options, using storage order",
            extra={"scope": scope, "question_id": question_id}
        )
        return storage_order(list(options))
