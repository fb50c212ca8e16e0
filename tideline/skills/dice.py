"""
Random Rolls Skill.

The engine rolls dice in exactly two places: picking a fish when an encounter
starts and pre-rolling a contract. Both take an injectable `random.Random`
so tests can seed or script the outcome; without one, rolls fall back to the
system's cryptographic source.
"""

from __future__ import annotations

import random
import secrets
from collections.abc import Sequence

from tideline.models.content import EncounterWeight, Range


def default_rng() -> random.Random:
    """Fair, unseeded randomness for live play."""
    return secrets.SystemRandom()


def roll_range(value_range: Range | None, rng: random.Random) -> int:
    """
    Roll an integer uniformly within an inclusive range.

    A missing range rolls 0. A range authored with min > max is read as the
    single value `min`.

    Args:
        value_range: Inclusive {min, max} range
        rng: Random source

    Returns:
        The rolled value
    """
    if value_range is None:
        return 0
    low = value_range.min
    high = max(value_range.min, value_range.max)
    return rng.randint(low, high)


def pick_weighted(pool: Sequence[EncounterWeight], rng: random.Random) -> str | None:
    """
    Pick an enemy id from a weighted pool.

    Negative weights count as zero. When every weight is zero the first row
    is picked.

    Args:
        pool: Weighted encounter rows
        rng: Random source

    Returns:
        The picked enemy id, or None for an empty pool
    """
    if not pool:
        return None

    total = sum(max(0.0, row.weight) for row in pool)
    if total <= 0:
        return pool[0].enemy_id

    roll = rng.random() * total
    for row in pool:
        roll -= max(0.0, row.weight)
        if roll < 0:
            return row.enemy_id
    return pool[-1].enemy_id
