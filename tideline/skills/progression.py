"""
Progression Skills for Tideline.

Stateless rules for experience, point pools and skill gating. The snapshot
transitions built on them live in `tideline.engine.progression`.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from tideline.models.content import (
    ContentBundle,
    ProgressionTuning,
    SkillDef,
    SkillType,
    XpCurve,
)
from tideline.models.state import PlayerState

MIN_XP_TO_NEXT = 10


class SkillUnlockCheck(BaseModel):
    """Result of checking whether a skill rank can be bought."""

    allowed: bool
    current_rank: int = Field(default=0, ge=0)
    reason: str = Field(default="", description="Reason if not allowed")


def xp_for_level(curve: XpCurve, level: int) -> int:
    """Experience needed to advance from `level` to the next."""
    return max(MIN_XP_TO_NEXT, math.floor(curve.base * curve.growth ** max(0, level - 1)))


def stat_point_pool(tuning: ProgressionTuning, level: int) -> int:
    """Total stat points a player of this level has earned."""
    return tuning.start_stat_points + tuning.stat_points_per_level * max(0, level - 1)


def skill_point_pool(tuning: ProgressionTuning, level: int) -> int:
    """Total skill points a player of this level has earned."""
    return tuning.start_skill_points + tuning.skill_points_per_level * max(0, level - 1)


def known_actions_for(content: ContentBundle, skills: dict[str, int]) -> list[str]:
    """
    Derive the known action set.

    The loadout's starting actions, followed by the actions granted by every
    ACTIVE skill at rank > 0, in order and without duplicates.
    """
    known = list(dict.fromkeys(content.loadout.start_actions))
    for skill_id, rank in skills.items():
        if rank <= 0:
            continue
        skill = content.skills.get(skill_id)
        if skill is None or skill.type != SkillType.ACTIVE:
            continue
        for action_id in skill.grants_actions:
            if action_id not in known:
                known.append(action_id)
    return known


def check_skill_unlock(player: PlayerState, skill: SkillDef) -> SkillUnlockCheck:
    """
    Check whether the player can buy the next rank of a skill.

    Requires the skill's level, a free skill point, every prerequisite at
    rank > 0, and a rank below the skill's maximum.
    """
    rank = player.skills.get(skill.id, 0)

    if player.level < skill.required_level:
        return SkillUnlockCheck(
            allowed=False,
            current_rank=rank,
            reason=f"Requires level {skill.required_level}.",
        )
    if rank >= skill.max_rank:
        return SkillUnlockCheck(allowed=False, current_rank=rank, reason="Already at max rank.")
    if player.skill_points <= 0:
        return SkillUnlockCheck(allowed=False, current_rank=rank, reason="No skill points.")

    missing = [req for req in skill.requires if player.skills.get(req, 0) <= 0]
    if missing:
        return SkillUnlockCheck(
            allowed=False,
            current_rank=rank,
            reason=f"Requires {', '.join(missing)}.",
        )

    return SkillUnlockCheck(allowed=True, current_rank=rank)
