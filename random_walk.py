# random_walk.py
"""Bounded random-walk step shared by every simulated feed.

All feeds draw their noise the same way: uniform noise of width ``spread``
centred on a drift term. The random source is injected so tests can pass a
seeded ``random.Random`` (or any object with ``uniform``/``choice``).
"""

import random
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


_default_rng = random.Random()


def next_value(previous: float, spread: float, drift: float = 0.0,
               rng: Optional[RandomSource] = None) -> float:
    """Return ``previous + drift + uniform(-0.5, 0.5) * spread``."""
    source = rng if rng is not None else _default_rng
    return previous + drift + source.uniform(-0.5, 0.5) * spread


def clamp(value: float, low: float, high: float = float("inf")) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value
