"""
Snapshot Migration for Tideline.

`normalize_state` turns whatever the persistence layer hands back (a current
snapshot, a partial one, a snapshot from the combat-era focus/hp model, or
garbage) into a valid current-shape GameState. It never raises: a snapshot
that cannot be read at all becomes a fresh run.

Rules:
- Missing numbers fall back to content-derived defaults; out-of-range
  numbers are clamped; non-numbers count as missing.
- Legacy focus maps onto tension by a fixed linear scale (full focus means
  no tension). Legacy hp maps onto line integrity by ratio.
- Derived values (max line integrity, known actions, fish phase) are
  recomputed, never trusted.
- A contract's pre-rolled encounters, index and phase are kept verbatim.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import ValidationError

from tideline.engine.progression import refresh_derived
from tideline.engine.run import make_new_run_state
from tideline.models.content import STAT_NAMES, ContentBundle
from tideline.models.event import GAME_EVENT_ADAPTER, GameEvent
from tideline.models.state import (
    CombatOutcome,
    CombatState,
    ContractPhase,
    ContractReward,
    ContractRun,
    ContractStats,
    Encounter,
    GameState,
    PlayerState,
    PlayerStats,
    Progress,
    SkillFlags,
    Spawn,
    TurnOwner,
)
from tideline.skills.effects import STAT_CAP
from tideline.skills.progression import skill_point_pool, stat_point_pool, xp_for_level
from tideline.skills.resources import clamp, fish_phase_for, round_half_up

logger = logging.getLogger(__name__)

LEGACY_MAX_FOCUS = 40
LEGACY_MAX_HP = 80


# =============================================================================
# Raw value helpers
# =============================================================================


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _get(data: dict[str, Any], *keys: str) -> Any:
    """First non-None value among the given keys (camelCase and snake_case)."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _num(value: Any) -> float | None:
    """A finite number, or None. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _int(
    value: Any,
    default: int,
    low: int | None = None,
    high: int | None = None,
) -> int:
    number = _num(value)
    result = default if number is None else round_half_up(number)
    if low is not None:
        result = max(low, result)
    if high is not None:
        result = min(high, result)
    return result


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


# =============================================================================
# Sections
# =============================================================================


def _normalize_stats(raw: dict[str, Any]) -> PlayerStats:
    return PlayerStats(**{stat: _int(raw.get(stat), 0, 0, STAT_CAP) for stat in STAT_NAMES})


def _normalize_skills(content: ContentBundle, raw: dict[str, Any]) -> dict[str, int]:
    skills = {}
    for skill_id, rank in raw.items():
        skill = content.skills.get(skill_id)
        if skill is None:
            logger.debug("Dropping rank for unknown skill %s", skill_id)
            continue
        rank = _int(rank, 0, 0, skill.max_rank)
        if rank > 0:
            skills[skill_id] = rank
    return skills


def _normalize_inventory(content: ContentBundle, raw: dict[str, Any]) -> dict[str, int]:
    inventory = {}
    for item_id, count in raw.items():
        if item_id not in content.items:
            continue
        count = _int(count, 0, 0)
        if count > 0:
            inventory[item_id] = count
    return inventory


def _normalize_tension(raw: dict[str, Any], max_tension: int) -> int:
    tension = _num(raw.get("tension"))
    if tension is not None:
        return _int(tension, 0, 0, max_tension)

    focus = _num(raw.get("focus"))
    if focus is None:
        return 0
    max_focus = _num(_get(raw, "maxFocus", "max_focus")) or LEGACY_MAX_FOCUS
    if max_focus <= 0:
        max_focus = LEGACY_MAX_FOCUS
    ratio = clamp(focus / max_focus, 0.0, 1.0)
    return _int((1 - ratio) * max_tension, 0, 0, max_tension)


def _normalize_integrity(raw: dict[str, Any], max_integrity: int) -> int:
    integrity = _num(_get(raw, "lineIntegrity", "line_integrity"))
    if integrity is not None:
        return _int(integrity, max_integrity, 0, max_integrity)

    hp = _num(raw.get("hp"))
    if hp is None:
        return max_integrity
    max_hp = _num(_get(raw, "maxHp", "max_hp")) or LEGACY_MAX_HP
    if max_hp <= 0:
        max_hp = LEGACY_MAX_HP
    ratio = clamp(hp / max_hp, 0.0, 1.0)
    return _int(ratio * max_integrity, max_integrity, 0, max_integrity)


def _normalize_player(content: ContentBundle, raw: dict[str, Any]) -> PlayerState:
    tuning = content.tuning
    level = _int(raw.get("level"), 1, 1)
    stats = _normalize_stats(_as_dict(raw.get("stats")))
    skills = _normalize_skills(content, _as_dict(raw.get("skills")))
    max_tension = tuning.tension.max_tension

    # Unspent points default to whatever the level has earned and not yet spent.
    spent_stats = sum(stats.get(stat) for stat in STAT_NAMES)
    spent_skills = sum(skills.values())
    stat_points_default = max(0, stat_point_pool(tuning.progression, level) - spent_stats)
    skill_points_default = max(0, skill_point_pool(tuning.progression, level) - spent_skills)

    return PlayerState(
        level=level,
        xp=_int(raw.get("xp"), 0, 0),
        xp_to_next=_int(
            _get(raw, "xpToNext", "xp_to_next"), xp_for_level(content.xp_curve, level), 1
        ),
        stats=stats,
        stat_points=_int(_get(raw, "statPoints", "stat_points"), stat_points_default, 0),
        skills=skills,
        skill_points=_int(_get(raw, "skillPoints", "skill_points"), skill_points_default, 0),
        tension=_normalize_tension(raw, max_tension),
        max_tension=max_tension,
        inventory=_normalize_inventory(content, _as_dict(raw.get("inventory"))),
    )


def _normalize_mods(content: ContentBundle, raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    mods: list[str] = []
    for mod_id in raw:
        if isinstance(mod_id, str) and mod_id in content.rig_mods and mod_id not in mods:
            mods.append(mod_id)
    return mods


def _normalize_contract(raw: Any) -> ContractRun | None:
    if not isinstance(raw, dict):
        return None

    contract_id = _str(_get(raw, "contractId", "contract_id"))
    region_id = _str(_get(raw, "regionId", "region_id"))
    rows = raw.get("encounters")
    if contract_id is None or region_id is None or not isinstance(rows, list) or not rows:
        logger.debug("Dropping malformed contract %r", contract_id)
        return None

    try:
        encounters = [Encounter.model_validate(row) for row in rows]
    except ValidationError:
        logger.debug("Dropping contract %s with malformed encounters", contract_id)
        return None

    phase_raw = raw.get("phase")
    phases = {phase.value: phase for phase in ContractPhase}
    phase = phases.get(phase_raw, ContractPhase.FIGHT)
    stats = _as_dict(raw.get("stats"))
    earned = _as_dict(raw.get("earned"))
    last_reward = raw.get("lastReward", raw.get("last_reward"))

    fight_rewards_raw = _get(raw, "fightRewards", "fight_rewards")
    fight_rewards_raw = fight_rewards_raw if isinstance(fight_rewards_raw, list) else []
    fight_rewards = [
        _int(fight_rewards_raw[i] if i < len(fight_rewards_raw) else None, 0, 0)
        for i in range(len(encounters))
    ]

    return ContractRun(
        contract_id=contract_id,
        region_id=region_id,
        encounters=encounters,
        index=_int(raw.get("index"), 0, 0, len(encounters) - 1),
        phase=phase,
        stats=ContractStats(
            perfect_count=_int(_get(stats, "perfectCount", "perfect_count"), 0, 0),
            fights_won=_int(_get(stats, "fightsWon", "fights_won"), 0, 0),
        ),
        earned=ContractReward(currency=_int(earned.get("currency"), 0, 0)),
        last_reward=(
            ContractReward(currency=_int(last_reward.get("currency"), 0, 0))
            if isinstance(last_reward, dict)
            else None
        ),
        fight_rewards=fight_rewards,
        final_reward=_int(_get(raw, "finalReward", "final_reward"), 0, 0),
    )


def _normalize_combat(
    content: ContentBundle, raw: Any, region_id: str, integrity: int
) -> CombatState | None:
    if not isinstance(raw, dict):
        return None

    enemy_id = _str(_get(raw, "enemyId", "enemy_id"))
    enemy = content.enemies.get(enemy_id) if enemy_id else None
    if enemy is None:
        logger.debug("Dropping combat against missing enemy %r", enemy_id)
        return None

    max_stamina = _int(
        _get(raw, "maxFishStamina", "max_fish_stamina", "enemyMaxHp"), enemy.stamina, 0
    )
    if max_stamina <= 0:
        max_stamina = enemy.stamina
    stamina = _int(
        _get(raw, "fishStamina", "fish_stamina", "enemyHp"), max_stamina, 0, max_stamina
    )

    flags_raw = _as_dict(raw.get("flags"))
    threshold_turn = _num(_get(flags_raw, "thresholdTurn", "threshold_turn"))
    flags = SkillFlags(
        negate_next_wear=_get(flags_raw, "negateNextWear", "negate_next_wear") is True,
        threshold_turn=int(threshold_turn) if threshold_turn is not None else None,
    )

    spawn_raw = _as_dict(_get(raw, "lastSpawn", "last_spawn"))
    last_spawn = Spawn(
        region_id=_str(_get(spawn_raw, "regionId", "region_id")) or region_id,
        enemy_id=_str(_get(spawn_raw, "enemyId", "enemy_id")) or enemy.id,
    )

    outcome = (
        CombatOutcome.DEFEAT_PROMPT
        if raw.get("outcome") == CombatOutcome.DEFEAT_PROMPT.value or integrity <= 0
        else CombatOutcome.NONE
    )

    # The fish turn resolves inside the call that starts it, so a stored
    # snapshot is always back on the player's turn (legacy "ENEMY" included).
    return CombatState(
        enemy_id=enemy.id,
        fish_stamina=stamina,
        max_fish_stamina=max_stamina,
        fish_phase=fish_phase_for(stamina, max_stamina),
        phase=TurnOwner.PLAYER,
        turn=_int(raw.get("turn"), 1, 1),
        brace=_int(raw.get("brace"), 0, 0),
        control=_int(raw.get("control"), 0, 0),
        flags=flags,
        last_spawn=last_spawn,
        outcome=outcome,
    )


def _normalize_event(raw: Any) -> GameEvent | None:
    if raw is None:
        return None
    try:
        return GAME_EVENT_ADAPTER.validate_python(raw)
    except ValidationError:
        return None


# =============================================================================
# Entry point
# =============================================================================


def _normalize(content: ContentBundle, raw: dict[str, Any]) -> GameState:
    raw_player = _as_dict(raw.get("player"))
    player = _normalize_player(content, raw_player)

    region_id = _str(_get(_as_dict(raw.get("progress")), "regionId", "region_id"))
    if region_id not in content.regions:
        region_id = content.first_region_id() or ""

    state = GameState(
        progress=Progress(region_id=region_id),
        player=player,
        currency=_int(raw.get("currency"), content.economy.starting_currency, 0),
        temporary_mods=_normalize_mods(content, _get(raw, "temporaryMods", "temporary_mods")),
        contract=_normalize_contract(raw.get("contract")),
        last_event=_normalize_event(_get(raw, "lastEvent", "last_event")),
    )

    # Derive the integrity range first, then place current integrity in it.
    state = refresh_derived(content, state, heal=True)
    integrity = _normalize_integrity(raw_player, state.player.max_line_integrity)
    state = state.model_copy(
        update={"player": state.player.model_copy(update={"line_integrity": integrity})}
    )

    combat = _normalize_combat(content, raw.get("combat"), region_id, integrity)
    return state.model_copy(update={"combat": combat})


def normalize_state(content: ContentBundle, raw: Any) -> GameState:
    """
    Normalize a persisted snapshot into the current shape.

    Args:
        content: Content bundle the snapshot will be played against
        raw: A GameState, a dict (camelCase or snake_case), or anything else

    Returns:
        A valid GameState. Unreadable input yields a fresh run.
    """
    if isinstance(raw, GameState):
        raw = raw.model_dump(by_alias=True, mode="json")
    if not isinstance(raw, dict):
        logger.warning("Snapshot is not an object (%s); starting a new run", type(raw).__name__)
        return make_new_run_state(content)

    try:
        return _normalize(content, raw)
    except (ValidationError, TypeError, ValueError) as exc:
        logger.warning("Snapshot could not be normalized; starting a new run: %s", exc)
        return make_new_run_state(content)
