"""Seeded random streams owned by a single generator call."""
from __future__ import annotations

import random
from typing import Sequence, Tuple, TypeVar

from cosmos.math.spatial import validate_seed

T = TypeVar("T")


class SeededRandom:
    """Deterministic random stream built from one integer seed.

    Each instance owns a private :class:`random.Random`; two instances built
    from the same seed yield the same values for the same sequence of calls,
    and nothing one instance does can be observed by another.
    """

    def __init__(self, seed: int) -> None:
        self._seed = validate_seed(seed)
        self._random = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def next(self) -> float:
        """Uniform float in ``[0, 1)``."""

        return self._random.random()

    def next_int(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` (both inclusive)."""

        if high < low:
            raise ValueError(f"empty integer range [{low}, {high}]")
        return low + int(self.next() * (high - low + 1))

    def next_float(self, low: float, high: float) -> float:
        return low + self.next() * (high - low)

    def chance(self, probability: float) -> bool:
        return self.next() < probability

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[int(self.next() * len(items))]

    def weighted_choice(self, entries: Sequence[Tuple[T, float]]) -> T:
        """Pick an item from ``(item, weight)`` pairs, proportional to weight."""

        total = sum(weight for _, weight in entries if weight > 0.0)
        if total <= 0.0:
            raise ValueError("weighted choice needs at least one positive weight")
        roll = self.next() * total
        for item, weight in entries:
            if weight <= 0.0:
                continue
            roll -= weight
            if roll < 0.0:
                return item
        # Floating point leftovers land on the last positive entry.
        return [item for item, weight in entries if weight > 0.0][-1]


__all__ = ["SeededRandom"]
