"""Shufflers used to randomize option order and question selection."""

import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class Shuffler(ABC):
    """Produces a permutation of a sequence."""

    @abstractmethod
    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a new list holding ``items`` in shuffled order."""


class RandomShuffler(Shuffler):
    """Uniform Fisher-Yates shuffle backed by ``random.Random``.

    Not cryptographically secure. Pass a seed for reproducible orders.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def shuffle(self, items: Sequence[T]) -> List[T]:
        shuffled = list(items)
        self._random.shuffle(shuffled)
        return shuffled
