"""
Stateless Skills for Tideline.

Skills are pure functions that:
- Take structured input (content records, snapshot fields, plain numbers)
- Apply one area of the fishing rules (dice, resources, effects, timing)
- Return structured output
- NEVER build or replace a snapshot (that is the engine's job)
"""

from tideline.skills.dice import default_rng, pick_weighted, roll_range
from tideline.skills.effects import (
    STAT_CAP,
    EffectTotals,
    collect_effects,
    effective_stats,
    installed_mods,
)
from tideline.skills.progression import (
    SkillUnlockCheck,
    check_skill_unlock,
    known_actions_for,
    skill_point_pool,
    stat_point_pool,
    xp_for_level,
)
from tideline.skills.resources import (
    PhaseTuning,
    apply_tension,
    compute_wear,
    control_factors,
    fish_phase_for,
    max_line_integrity,
    phase_tuning,
    safe_tension_limit,
)
from tideline.skills.timing import (
    TimingModifier,
    TimingWindow,
    classify_timing,
    timing_modifier,
    timing_window,
)

__all__ = [
    # Dice
    "default_rng",
    "pick_weighted",
    "roll_range",
    # Effects
    "EffectTotals",
    "STAT_CAP",
    "collect_effects",
    "effective_stats",
    "installed_mods",
    # Resources
    "PhaseTuning",
    "apply_tension",
    "compute_wear",
    "control_factors",
    "fish_phase_for",
    "max_line_integrity",
    "phase_tuning",
    "safe_tension_limit",
    # Timing
    "TimingWindow",
    "TimingModifier",
    "timing_window",
    "classify_timing",
    "timing_modifier",
    # Progression
    "SkillUnlockCheck",
    "check_skill_unlock",
    "known_actions_for",
    "skill_point_pool",
    "stat_point_pool",
    "xp_for_level",
]
