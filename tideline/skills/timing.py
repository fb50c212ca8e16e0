"""
Timing Minigame Skills.

The caller animates a marker across a bar spanning 0..1 and samples where the
player stopped it. The distance from the bar's center (0.5) is graded against
two radii derived from tuning and the player's stats. The resulting grade
travels with the action into the combat resolver.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tideline.models.content import TimingTuning
from tideline.models.event import TimingGrade
from tideline.skills.resources import clamp

BAR_CENTER = 0.5
MIN_RADIUS_GAP = 0.04


class TimingWindow(BaseModel):
    """Grading radii, as distances from the bar's center."""

    perfect_radius: float = Field(ge=0)
    good_radius: float = Field(ge=0)


class TimingModifier(BaseModel):
    """How a grade scales an action."""

    stamina_mult: float = Field(default=1.0, description="Scales stamina taken from the fish")
    tension_bonus: int = Field(
        default=0, description="Added to tension (positive on MISS, negative on PERFECT)"
    )


def timing_window(tuning: TimingTuning, precision: int, control: int, level: int) -> TimingWindow:
    """
    Compute the PERFECT and GOOD radii.

    Precision widens the perfect zone; control and level widen the good zone.
    The good radius always stays at least 0.04 wider than the perfect one.

    Args:
        tuning: Timing tuning
        precision: Effective precision stat
        control: Effective control stat
        level: Player level

    Returns:
        TimingWindow with both radii clamped to their bounds
    """
    perfect = tuning.base_perfect + tuning.perfect_per_precision * precision
    perfect = clamp(perfect, tuning.perfect_min, tuning.perfect_max)

    good = tuning.base_good + tuning.good_per_control * control + tuning.good_per_level * (level - 1)
    good = max(good, perfect + MIN_RADIUS_GAP)
    good = clamp(good, tuning.good_min, tuning.good_max)

    return TimingWindow(perfect_radius=perfect, good_radius=good)


def classify_timing(position: float, window: TimingWindow) -> TimingGrade:
    """Grade a sampled bar position."""
    distance = abs(position - BAR_CENTER)
    if distance <= window.perfect_radius:
        return TimingGrade.PERFECT
    if distance <= window.good_radius:
        return TimingGrade.GOOD
    return TimingGrade.MISS


def timing_modifier(grade: TimingGrade | None, precision: int, control: int) -> TimingModifier:
    """
    Look up the stamina multiplier and tension bonus for a grade.

    MISS cuts progress hard and adds tension, both softened by precision and
    control. GOOD is neutral. PERFECT amplifies progress and relieves tension,
    both growing with precision. No grade is treated as GOOD.
    """
    if grade == TimingGrade.MISS:
        return TimingModifier(
            stamina_mult=min(0.5, 0.35 + 0.01 * precision),
            tension_bonus=max(2, 8 - control // 2),
        )
    if grade == TimingGrade.PERFECT:
        return TimingModifier(
            stamina_mult=1.25 + min(0.25, 0.015 * precision),
            tension_bonus=-(4 + min(6, precision // 2)),
        )
    return TimingModifier()
