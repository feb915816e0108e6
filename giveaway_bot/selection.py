"""Uniform winner selection."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_system_random = random.SystemRandom()


def select_winners(
    entrants: Sequence[T], count: int, rng: random.Random | None = None
) -> list[T]:
    """
    Draw up to ``count`` distinct winners uniformly at random.

    Runs a partial Fisher-Yates shuffle over a copy of ``entrants``: position
    ``i`` is swapped with a random position in ``[i, n)`` and the first
    ``count`` positions are returned. Every ``count``-subset is equally likely.

    Args:
        entrants: Everyone who entered; left untouched
        count: Number of winners requested (at least 1)
        rng: Random source, defaults to ``random.SystemRandom``

    Returns:
        ``min(len(entrants), count)`` winners in draw order
    """
    if count < 1:
        raise ValueError("At least one winner must be requested")

    rng = rng or _system_random
    pool = list(entrants)
    draws = min(count, len(pool))
    for i in range(draws):
        j = rng.randrange(i, len(pool))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:draws]


__all__ = ["select_winners"]
