"""Unbiased permutation helper for session ordering."""

from __future__ import annotations

import random


def fisher_yates(n: int, rng: random.Random | None = None) -> list[int]:
    """Return a uniformly random permutation of ``range(n)``.

    Every one of the ``n!`` orderings is equally likely provided `rng` is
    uniform. Pass a seeded ``random.Random`` for reproducible orders.
    """
    rng = rng or random.Random()
    order = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order
