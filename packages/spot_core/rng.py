from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")


@dataclass
class RNG:
    """Seeded draw stream; the same seed always yields the same draws."""

    seed: int
    algo: str = "mt19937"
    version: str = "py-random"
    _r: random.Random = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._r = self.create()

    def create(self) -> random.Random:
        r = random.Random()
        r.seed(int(self.seed))
        return r

    def random(self) -> float:
        return self._r.random()

    def pick(self, xs: Sequence[T]) -> T:
        return pick_one(self, xs)


def pick_one(rng: RNG, xs: Sequence[T]) -> T:
    if not xs:
        raise ValueError("pick_one on empty sequence")
    idx = int(rng.random() * len(xs))
    return xs[min(len(xs) - 1, max(0, idx))]


__all__ = ["RNG", "pick_one"]
