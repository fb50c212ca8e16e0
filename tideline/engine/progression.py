"""
Progression Resolver for Tideline.

Snapshot transitions for experience, stat points, skill ranks and respec.
Derived values (max line integrity, known actions) are always recomputed
from scratch, never patched incrementally.
"""

from __future__ import annotations

import logging

from tideline.models.content import STAT_NAMES, ContentBundle
from tideline.models.event import LevelUpEvent, RespecEvent, SkillEvent, StatEvent, XpEvent
from tideline.models.state import GameState, PlayerStats, SkillFlags
from tideline.engine.snapshot import missing_content, soft_fail, with_event
from tideline.skills.effects import STAT_CAP, effective_stats
from tideline.skills.progression import (
    check_skill_unlock,
    known_actions_for,
    skill_point_pool,
    stat_point_pool,
    xp_for_level,
)
from tideline.skills.resources import max_line_integrity

logger = logging.getLogger(__name__)


def refresh_derived(content: ContentBundle, state: GameState, *, heal: bool = False) -> GameState:
    """
    Recompute max line integrity and the known action set.

    Current integrity is clamped into the new range, or restored to the new
    max when `heal` is set.
    """
    player = state.player
    durability = effective_stats(content, state).durability
    max_integrity = max_line_integrity(content.tuning.integrity, player.level, durability)
    integrity = max_integrity if heal else min(player.line_integrity, max_integrity)

    return state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "max_line_integrity": max_integrity,
                    "line_integrity": max(0, integrity),
                    "known_actions": known_actions_for(content, player.skills),
                }
            )
        }
    )


def grant_xp(content: ContentBundle, state: GameState, amount: int) -> GameState:
    """
    Add experience, levelling up as many times as it covers.

    Each level grants stat and skill points per the progression tuning. Any
    level-up fully restores line integrity at the final level reached.

    Args:
        content: Content bundle
        state: Current snapshot
        amount: Experience to add (negative amounts add nothing)

    Returns:
        New snapshot with an XP or LEVEL_UP event
    """
    player = state.player
    tuning = content.tuning.progression
    amount = max(0, amount)

    xp = player.xp + amount
    level = player.level
    xp_to_next = player.xp_to_next
    levels_gained = 0

    while xp >= xp_to_next:
        xp -= xp_to_next
        level += 1
        xp_to_next = xp_for_level(content.xp_curve, level)
        levels_gained += 1

    next_state = state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "xp": xp,
                    "level": level,
                    "xp_to_next": xp_to_next,
                    "stat_points": player.stat_points + tuning.stat_points_per_level * levels_gained,
                    "skill_points": player.skill_points
                    + tuning.skill_points_per_level * levels_gained,
                }
            )
        }
    )

    if not levels_gained:
        return with_event(next_state, XpEvent(amount=amount))

    logger.debug("Level up: %d -> %d", player.level, level)
    next_state = refresh_derived(content, next_state, heal=True)
    return with_event(next_state, LevelUpEvent(level=level))


def spend_stat_point(content: ContentBundle, state: GameState, stat: str) -> GameState:
    """
    Spend one unspent stat point on a stat.

    Max line integrity is recomputed immediately and current integrity is
    clamped into the new range.
    """
    if stat not in STAT_NAMES:
        return soft_fail(state, f"Unknown stat: {stat}")

    player = state.player
    if player.stat_points <= 0:
        return soft_fail(state, "No stat points.")

    value = player.stats.get(stat)
    if value >= STAT_CAP:
        return soft_fail(state, f"{stat} is already at {STAT_CAP}.")

    next_state = state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "stats": player.stats.model_copy(update={stat: value + 1}),
                    "stat_points": player.stat_points - 1,
                }
            )
        }
    )
    next_state = refresh_derived(content, next_state)
    return with_event(next_state, StatEvent(stat=stat, value=value + 1))


def unlock_skill(content: ContentBundle, state: GameState, skill_id: str) -> GameState:
    """
    Unlock a skill or upgrade it by one rank.

    Requires the skill's level, a skill point and every prerequisite skill
    at rank > 0. Recomputes the known action set afterwards.
    """
    skill = content.skills.get(skill_id)
    if skill is None:
        return missing_content(state, "skill", skill_id)

    player = state.player
    check = check_skill_unlock(player, skill)
    if not check.allowed:
        return soft_fail(state, check.reason)

    rank = check.current_rank + 1
    next_state = state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "skills": {**player.skills, skill_id: rank},
                    "skill_points": player.skill_points - 1,
                }
            )
        }
    )
    next_state = refresh_derived(content, next_state)
    return with_event(next_state, SkillEvent(skill_id=skill_id, rank=rank))


def respec(content: ContentBundle, state: GameState) -> GameState:
    """
    Refund every stat and skill point.

    Stats reset to zero, ranks clear, both pools are recomputed from the
    current level, integrity is restored to the new max, and a live
    encounter loses its brace, control and one-turn skill flags.
    Always permitted.
    """
    player = state.player
    tuning = content.tuning.progression

    next_state = state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "stats": PlayerStats(),
                    "skills": {},
                    "stat_points": stat_point_pool(tuning, player.level),
                    "skill_points": skill_point_pool(tuning, player.level),
                }
            )
        }
    )
    if state.combat is not None:
        next_state = next_state.model_copy(
            update={
                "combat": state.combat.model_copy(
                    update={"brace": 0, "control": 0, "flags": SkillFlags()}
                )
            }
        )

    next_state = refresh_derived(content, next_state, heal=True)
    return with_event(next_state, RespecEvent())
