"""Random number generation utilities for the Q-learning lab."""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class SeededRNG:
    """Seeded random number generator for reproducible random steps."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose random element from sequence."""
        return self._random.choice(seq)
