"""
Resource Model Skills for Tideline.

Stateless functions for the two risk resources:
- Tension: the risk meter, 0..max_tension
- Line integrity: the only failure resource, 0..max_line_integrity

plus the fish phase curve that governs pressure and reel effectiveness.

The wear curve and phase multipliers are hand-tuned constants kept here
rather than in `Tuning`.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from tideline.models.content import IntegrityTuning, TensionTuning
from tideline.models.event import FishPhase

# Wear curve
WEAR_STEP = 10
WEAR_MIN = 1
WEAR_MAX = 8
DURABILITY_WEAR_RATE = 0.03
DURABILITY_WEAR_FLOOR = 0.65

# Phase thresholds on the stamina ratio
AGGRESSIVE_ABOVE = 0.66
DEFENSIVE_ABOVE = 0.33

# Control dampening
CONTROL_STAT_RATE = 0.02
CONTROL_STAT_FLOOR = 0.72
COMBAT_CONTROL_RATE = 0.05
COMBAT_CONTROL_FLOOR = 0.7


class PhaseTuning(BaseModel):
    """Multipliers that apply while the fish is in a phase."""

    pressure_mult: float = Field(description="Scales the fish's pressure")
    reel_mult: float = Field(description="Scales stamina taken by reel/technique")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return math.floor(value + 0.5)


# =============================================================================
# Tension
# =============================================================================


def safe_tension_limit(tuning: TensionTuning, combat_control: int, control_stat: int) -> int:
    """
    Compute this turn's safe tension limit.

    Tension strictly above the limit wears the line.

    Args:
        tuning: Tension tuning
        combat_control: Encounter-scoped control
        control_stat: The player's effective control stat

    Returns:
        The safe limit, clamped to the tuning bounds
    """
    limit = (
        tuning.safe_base
        + tuning.safe_per_combat_control * combat_control
        + tuning.safe_per_control * control_stat
    )
    return int(clamp(round_half_up(limit), tuning.safe_min, tuning.safe_max))


def control_factors(control_stat: int, combat_control: int) -> tuple[float, float]:
    """
    Multiplicative dampening from the control stat and combat control.

    Returns:
        Tuple of (stat_factor, combat_factor), each floored
    """
    stat_factor = max(CONTROL_STAT_FLOOR, 1 - control_stat * CONTROL_STAT_RATE)
    combat_factor = max(COMBAT_CONTROL_FLOOR, 1 - combat_control * COMBAT_CONTROL_RATE)
    return stat_factor, combat_factor


def apply_tension(tension: int, delta: int, max_tension: int) -> int:
    return int(clamp(tension + delta, 0, max_tension))


# =============================================================================
# Line Integrity
# =============================================================================


def durability_wear_mult(durability: int) -> float:
    return clamp(1 - durability * DURABILITY_WEAR_RATE, DURABILITY_WEAR_FLOOR, 1.0)


def compute_wear(tension: int, safe_limit: int, durability: int, wear_mult: float = 1.0) -> int:
    """
    Compute integrity wear for a turn.

    Args:
        tension: Tension at the end of the turn
        safe_limit: This turn's safe limit
        durability: The player's effective durability
        wear_mult: Aggregated wear multiplier from skills and rig mods

    Returns:
        Wear in 1..8, or 0 when tension does not exceed the safe limit
    """
    excess = tension - safe_limit
    if excess <= 0:
        return 0

    wear = clamp(math.ceil(excess / WEAR_STEP), WEAR_MIN, WEAR_MAX)
    wear = wear * durability_wear_mult(durability) * wear_mult
    return int(clamp(round_half_up(wear), WEAR_MIN, WEAR_MAX))


def max_line_integrity(tuning: IntegrityTuning, level: int, durability: int) -> int:
    """Derive max line integrity from level and durability."""
    value = tuning.base + tuning.per_level * (level - 1) + tuning.per_durability * durability
    return int(clamp(value, tuning.min, tuning.max))


# =============================================================================
# Fish Phase
# =============================================================================


def fish_phase_for(stamina: int, max_stamina: int) -> FishPhase:
    """Derive the fish phase from its remaining stamina ratio."""
    if max_stamina <= 0:
        return FishPhase.EXHAUSTED
    ratio = stamina / max_stamina
    if ratio > AGGRESSIVE_ABOVE:
        return FishPhase.AGGRESSIVE
    if ratio > DEFENSIVE_ABOVE:
        return FishPhase.DEFENSIVE
    return FishPhase.EXHAUSTED


def phase_tuning(phase: FishPhase, level: int) -> PhaseTuning:
    """
    Get pressure and reel multipliers for a fish phase.

    Aggressive pressure eases with player level, by up to 0.12.
    """
    if phase == FishPhase.AGGRESSIVE:
        eased = min(0.12, 0.02 * max(0, level - 1))
        return PhaseTuning(pressure_mult=1.2 - eased, reel_mult=0.9)
    if phase == FishPhase.DEFENSIVE:
        return PhaseTuning(pressure_mult=0.95, reel_mult=0.8)
    return PhaseTuning(pressure_mult=0.7, reel_mult=1.25)
