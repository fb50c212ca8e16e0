"""
Stat & Effect Aggregation Skills for Tideline.

Folds every active skill rank and installed rig mod into:
- Effective stats (base stats + rig mod stat bonuses)
- EffectTotals, the only thing the combat resolver reads about skills

The resolver never looks at a skill or mod id. Adding a skill to the content
bundle only ever means adding typed effects here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from tideline.models.content import (
    STAT_NAMES,
    BraceBonusEffect,
    ContentBundle,
    ControlOnBraceEffect,
    ControlOnTensionEffect,
    ExhaustedBleedEffect,
    FishTensionMultEffect,
    IntegrityWearMultEffect,
    ModTensionMultEffect,
    NegateWearOnPerfectEffect,
    ReliefBonusEffect,
    RigModDef,
    SkillEffect,
    StatBonusEffect,
    WearMultEffect,
)
from tideline.models.state import GameState, PlayerStats

logger = logging.getLogger(__name__)

STAT_CAP = 99


class EffectTotals(BaseModel):
    """Aggregated skill and rig mod effects."""

    wear_mult: float = Field(default=1.0, description="Multiplies integrity wear")
    fish_tension_mult: float = Field(default=1.0, description="Multiplies fish pressure")
    brace_bonus: int = Field(default=0, description="Added to the brace shield")
    relief_bonus: int = Field(default=0, description="Added to brace/adjust tension relief")
    control_on_brace: int = Field(default=0, description="Combat control granted on brace")
    tension_threshold: int | None = Field(
        default=None, description="Lowest threshold that grants control when crossed"
    )
    control_on_threshold: int = Field(default=0, description="Control granted on crossing")
    exhausted_bleed: int = Field(default=0, description="Stamina drained per exhausted fish turn")
    negate_wear_on_perfect: bool = False


def installed_mods(content: ContentBundle, state: GameState) -> list[RigModDef]:
    """Resolve installed rig mod ids, skipping ids missing from content."""
    mods = []
    for mod_id in state.temporary_mods:
        mod = content.rig_mods.get(mod_id)
        if mod is None:
            logger.debug("Installed rig mod %s missing from content", mod_id)
            continue
        mods.append(mod)
    return mods


def effective_stats(content: ContentBundle, state: GameState) -> PlayerStats:
    """
    Base stats plus flat bonuses from installed rig mods.

    Args:
        content: Content bundle
        state: Current snapshot

    Returns:
        PlayerStats with each stat clamped to 0..99
    """
    totals = {stat: state.player.stats.get(stat) for stat in STAT_NAMES}
    for mod in installed_mods(content, state):
        for effect in mod.effects:
            if isinstance(effect, StatBonusEffect):
                totals[effect.stat] += effect.add

    return PlayerStats(**{stat: max(0, min(STAT_CAP, value)) for stat, value in totals.items()})


def _fold_skill_effect(totals: dict, effect: SkillEffect, rank: int) -> None:
    if isinstance(effect, WearMultEffect):
        totals["wear_mult"] *= effect.mult**rank
    elif isinstance(effect, FishTensionMultEffect):
        totals["fish_tension_mult"] *= effect.mult**rank
    elif isinstance(effect, BraceBonusEffect):
        totals["brace_bonus"] += effect.add * rank
    elif isinstance(effect, ReliefBonusEffect):
        totals["relief_bonus"] += effect.add * rank
    elif isinstance(effect, ControlOnBraceEffect):
        totals["control_on_brace"] += effect.add * rank
    elif isinstance(effect, ControlOnTensionEffect):
        # Lowest threshold fires first; every grant rides on it.
        current = totals["tension_threshold"]
        if current is None or effect.threshold < current:
            totals["tension_threshold"] = effect.threshold
        totals["control_on_threshold"] += effect.add * rank
    elif isinstance(effect, ExhaustedBleedEffect):
        totals["exhausted_bleed"] += effect.add * rank
    elif isinstance(effect, NegateWearOnPerfectEffect):
        totals["negate_wear_on_perfect"] = True


def _active_skill_effects(
    content: ContentBundle, state: GameState
) -> Iterable[tuple[SkillEffect, int]]:
    for skill_id, rank in state.player.skills.items():
        if rank <= 0:
            continue
        skill = content.skills.get(skill_id)
        if skill is None:
            logger.debug("Ranked skill %s missing from content", skill_id)
            continue
        for effect in skill.effects:
            yield effect, rank


def collect_effects(content: ContentBundle, state: GameState) -> EffectTotals:
    """
    Fold every ranked skill, then every installed rig mod, into EffectTotals.

    Additive effects scale linearly with rank; multiplicative effects
    compound per rank. Rig mod multipliers are applied after skills.

    Args:
        content: Content bundle
        state: Current snapshot

    Returns:
        EffectTotals for the combat resolver
    """
    totals = EffectTotals().model_dump()

    for effect, rank in _active_skill_effects(content, state):
        _fold_skill_effect(totals, effect, rank)

    for mod in installed_mods(content, state):
        for effect in mod.effects:
            if isinstance(effect, ModTensionMultEffect):
                totals["fish_tension_mult"] *= effect.mult
            elif isinstance(effect, IntegrityWearMultEffect):
                totals["wear_mult"] *= effect.mult

    return EffectTotals(**totals)
