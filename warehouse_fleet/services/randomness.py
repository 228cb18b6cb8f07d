"""Pluggable source of the pseudo-random decisions made by the fleet tick."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Thin wrapper over :class:`random.Random`.

    Every random branch of the simulation goes through one of these methods,
    so tests can seed the generator or override a method to script an exact
    outcome.
    """

    def __init__(self, seed: Optional[int] = None, generator: Optional[random.Random] = None) -> None:
        self._random = generator or random.Random(seed)

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given probability."""

        return self._random.random() < probability

    def uniform(self, low: float, high: float) -> float:
        """Sample from the half-open range ``[low, high)``."""

        return low + (high - low) * self._random.random()

    def randint(self, low: int, high: int) -> int:
        """Sample an integer from the closed range ``[low, high]``."""

        return self._random.randint(low, high)

    def choice(self, items: Sequence[T]) -> T:
        return self._random.choice(items)
