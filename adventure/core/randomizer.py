from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol


class Randomizer(Protocol):
    def int_in_range(self, max_value: int) -> int:  # pragma: no cover
        ...


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


@dataclass(slots=True)
class SeededRandomizer:
    """Uniform integers in `[1, max_value]` from a private `random.Random`.

    Each live session owns one, seeded for reproducibility/debugging.
    """

    rng: random.Random

    @staticmethod
    def from_seed(seed: int | None = None) -> "SeededRandomizer":
        return SeededRandomizer(rng=random.Random(seed))

    def int_in_range(self, max_value: int) -> int:
        if max_value <= 0:
            raise ValueError("max_value must be > 0")
        return self.rng.randint(1, max_value)
