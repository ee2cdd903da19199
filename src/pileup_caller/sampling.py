"""Seeded random source and sampling without replacement.

All random decisions of a run come from one RandomSource consumed in a fixed
order: panel order, then sample order, then the draw order of each call.
"""

import logging
import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    """Minimal random capability needed by the genotype callers."""

    def randrange(self, stop: int) -> int: ...


def make_random_source(seed: int | None = None) -> random.Random:
    """Create the random source for a run.

    Args:
        seed: Integer seed for reproducible output. None seeds from system entropy.

    Returns:
        A random.Random instance.
    """
    if seed is None:
        logger.debug("No random seed given, seeding from system entropy")
    else:
        logger.debug("Seeding random source with %d", seed)
    return random.Random(seed)


def sample_without_replacement(pool: Sequence[T], k: int, rng: RandomSource) -> list[T]:
    """Draw k elements uniformly without replacement.

    Uses a partial Fisher-Yates shuffle on a copy of the pool, consuming
    exactly k draws from rng.

    Raises:
        ValueError: If k is negative or larger than the pool.
    """
    n = len(pool)
    if k < 0 or k > n:
        raise ValueError(f"Cannot draw {k} elements from a pool of {n}")

    items = list(pool)
    for i in range(k):
        j = i + rng.randrange(n - i)
        items[i], items[j] = items[j], items[i]
    return items[:k]


def choose_one(pool: Sequence[T], rng: RandomSource) -> T:
    """Pick a single element uniformly at random."""
    if not pool:
        raise ValueError("Cannot choose from an empty pool")
    return pool[rng.randrange(len(pool))]
