"""
Injectable randomness.

Matching deliberately perturbs scores and shuffles near-equal results so the same
answers do not always surface the same drinks. Every random step takes a
`RandomSource` so tests can pass a seeded or scripted source.
"""

from __future__ import annotations

import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in [0.0, 1.0)."""
        ...


class PythonRandomSource:
    """`RandomSource` backed by `random.Random` (unseeded unless `seed` is given)."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


def default_source(rng: RandomSource | None = None) -> RandomSource:
    return rng if rng is not None else PythonRandomSource()


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    return low + (high - low) * rng.next()


def chance(rng: RandomSource, probability: float) -> bool:
    return rng.next() < probability


def shuffled(items: Sequence[T], rng: RandomSource) -> list[T]:
    """Return a Fisher-Yates shuffled copy of `items`."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        # min() guards a misbehaving source that returns exactly 1.0.
        j = min(int(rng.next() * (i + 1)), i)
        out[i], out[j] = out[j], out[i]
    return out
