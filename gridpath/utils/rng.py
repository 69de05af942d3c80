"""Reproducible randomness for layout generation."""

import random
from typing import Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class SeededRNG:
    """
    Random source for the grid factory.

    Two instances built with the same seed produce the same layouts; a seed
    of None draws from system entropy.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reseed(self, seed: Optional[int]):
        self._seed = seed
        self._random.seed(seed)

    def pick(self, items: Sequence[T]) -> T:
        """One element of a non-empty sequence."""
        if not items:
            raise ValueError("Cannot pick from an empty sequence")
        return self._random.choice(items)

    def pick_many(self, items: Iterable[T], count: int) -> List[T]:
        """Up to count distinct elements, in random order."""
        pool = list(items)
        return self._random.sample(pool, min(count, len(pool)))

    def weight(self, max_weight: int) -> int:
        """A painted cell weight in [2, max_weight]."""
        return self._random.randint(2, max_weight)


# Shared instance for callers that do not need reproducible layouts
default_rng = SeededRNG()
