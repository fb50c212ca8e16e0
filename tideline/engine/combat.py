"""
Combat State Machine for Tideline.

Turn-based resolution of one encounter:

    PLAYER --apply_action/use_item--> FISH (automatic) --> PLAYER
                                          |
                                          +--> DEFEAT_PROMPT (integrity 0)

DEFEAT_PROMPT blocks every action until the caller retries or flees. A
finishing blow resolves the catch immediately; the fish never answers it.

All functions are pure: they return a new GameState and never mutate the
one passed in.
"""

from __future__ import annotations

import logging
import random

from tideline.engine.intent import ActionIntent, IntentKind, resolve_intent
from tideline.engine.progression import grant_xp
from tideline.engine.snapshot import fresh_combat, missing_content, soft_fail
from tideline.models.content import ContentBundle, EnemyDef
from tideline.models.event import (
    DefeatPromptEvent,
    FishPhase,
    FleeEvent,
    GameEvent,
    IntegrityEvent,
    LogEvent,
    PhaseEvent,
    SpawnEvent,
    StaminaEvent,
    TensionEvent,
    TimingGrade,
    XpEvent,
)
from tideline.models.state import CombatOutcome, GameState, TurnOwner
from tideline.skills.dice import default_rng, pick_weighted
from tideline.skills.effects import EffectTotals, collect_effects, effective_stats
from tideline.skills.resources import (
    apply_tension,
    compute_wear,
    control_factors,
    fish_phase_for,
    phase_tuning,
    round_half_up,
    safe_tension_limit,
)
from tideline.skills.timing import timing_modifier

logger = logging.getLogger(__name__)

REEL_POWER_RATE = 0.03
TECHNIQUE_POWER_RATE = 0.05

# Surcharge for reeling while already over the safe limit
POWER_RISK_BASE = 2
POWER_RISK_RATE = 0.25

BRACE_BASE_SHIELD = 6
ADJUST_BASE_CONTROL = 1


def power_risk(tension: int, safe_limit: int, power: int) -> int:
    """Extra tension for reeling hard while already over the safe limit."""
    if tension <= safe_limit:
        return 0
    return POWER_RISK_BASE + round_half_up(power * POWER_RISK_RATE)


# =============================================================================
# Encounter lifecycle
# =============================================================================


def start_fight(
    content: ContentBundle,
    state: GameState,
    rng: random.Random | None = None,
) -> GameState:
    """
    Spawn a fish from the current region's weighted pool.

    Args:
        content: Content bundle
        state: Current snapshot
        rng: Random source for the pick (defaults to system randomness)

    Returns:
        New snapshot with an active encounter and a SPAWN event
    """
    if state.combat is not None:
        return soft_fail(state, "Already in a fight.")
    if state.contract is not None:
        return soft_fail(state, "A contract is in progress.")

    region_id = state.progress.region_id
    region = content.regions.get(region_id)
    if region is None:
        return missing_content(state, "region", region_id)
    if state.player.level < region.required_level:
        return soft_fail(state, f"Region locked: level {region.required_level}+")

    enemy_id = pick_weighted(region.encounter_pool, rng or default_rng())
    if enemy_id is None:
        return soft_fail(state, f"No fish in {region.name or region_id}.")
    enemy = content.enemies.get(enemy_id)
    if enemy is None:
        return missing_content(state, "enemy", enemy_id)

    return state.model_copy(
        update={
            "combat": fresh_combat(region_id, enemy),
            "last_event": SpawnEvent(region_id=region_id, enemy_id=enemy_id),
        }
    )


def retry_fight(content: ContentBundle, state: GameState) -> GameState:
    """
    Retry the lost encounter from the defeat prompt.

    Respawns the same fish at full stamina and restores integrity to max.
    Tension carries over, clamped.
    """
    combat = state.combat
    if combat is None or combat.outcome != CombatOutcome.DEFEAT_PROMPT:
        return soft_fail(state, "Nothing to retry.")

    spawn = combat.last_spawn
    if spawn is None:
        return soft_fail(state, "No spawn to retry.")
    enemy = content.enemies.get(spawn.enemy_id)
    if enemy is None:
        return missing_content(state, "enemy", spawn.enemy_id)

    player = state.player
    return state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "line_integrity": player.max_line_integrity,
                    "tension": apply_tension(player.tension, 0, player.max_tension),
                }
            ),
            "combat": fresh_combat(spawn.region_id, enemy),
            "last_event": LogEvent(text="Retry!"),
        }
    )


def flee(state: GameState) -> GameState:
    """Abandon the encounter. Tension drops to zero."""
    if state.combat is None:
        return soft_fail(state, "No fight to flee.")

    return state.model_copy(
        update={
            "player": state.player.model_copy(update={"tension": 0}),
            "combat": None,
            "last_event": FleeEvent(),
        }
    )


# =============================================================================
# Player turn
# =============================================================================


def apply_action(
    content: ContentBundle,
    state: GameState,
    action_id: str,
    grade: TimingGrade | None = None,
) -> GameState:
    """
    Resolve one player action, then the fish's automatic response.

    Args:
        content: Content bundle
        state: Current snapshot
        action_id: A known action id
        grade: Optional timing grade from the timing bar

    Returns:
        New snapshot. Unchanged when it is not the player's turn or the
        defeat prompt is showing.
    """
    combat = state.combat
    if combat is None:
        return soft_fail(state, "No fight in progress.")
    if combat.outcome == CombatOutcome.DEFEAT_PROMPT:
        return state
    if combat.phase != TurnOwner.PLAYER:
        return state

    action = content.actions.get(action_id)
    if action is None:
        return missing_content(state, "action", action_id)
    if action_id not in state.player.known_actions:
        return soft_fail(state, f"Action not known: {action_id}")
    enemy = content.enemies.get(combat.enemy_id)
    if enemy is None:
        return missing_content(state, "enemy", combat.enemy_id)

    intent = resolve_intent(action)
    if not intent.timed:
        grade = None

    acted, event = _resolve_player_intent(content, state, intent, grade)

    if acted.combat.fish_stamina <= 0:
        return _resolve_win(content, acted)

    return _fish_turn(content, acted, enemy, state.player.tension, event)


def _resolve_player_intent(
    content: ContentBundle,
    state: GameState,
    intent: ActionIntent,
    grade: TimingGrade | None,
) -> tuple[GameState, GameEvent]:
    combat = state.combat
    player = state.player
    stats = effective_stats(content, state)
    totals = collect_effects(content, state)

    modifier = timing_modifier(grade, stats.precision, stats.control)
    phase_mods = phase_tuning(combat.fish_phase, player.level)
    safe_limit = safe_tension_limit(content.tuning.tension, combat.control, stats.control)
    _, combat_factor = control_factors(stats.control, combat.control)

    tension = player.tension
    stamina = combat.fish_stamina
    brace = combat.brace
    control = combat.control
    flags = combat.flags

    if intent.kind in (IntentKind.REEL, IntentKind.TECHNIQUE):
        rate = TECHNIQUE_POWER_RATE if intent.kind == IntentKind.TECHNIQUE else REEL_POWER_RATE
        take = round_half_up(
            intent.stamina_take
            * phase_mods.reel_mult
            * modifier.stamina_mult
            * (1 + stats.power * rate)
        )
        stamina = max(0, stamina - max(0, take))

        gain = intent.tension + max(0, modifier.tension_bonus)
        gain += power_risk(tension, safe_limit, stats.power)
        if gain > 0:
            gain = round_half_up(gain * combat_factor)
        gain += min(0, modifier.tension_bonus)
        tension = apply_tension(tension, gain, player.max_tension)

    elif intent.kind == IntentKind.BRACE:
        relief = intent.relief + totals.relief_bonus
        tension = apply_tension(tension, modifier.tension_bonus - relief, player.max_tension)
        brace += max(0, BRACE_BASE_SHIELD + stats.tactics // 2 + totals.brace_bonus)
        control += max(0, totals.control_on_brace)

    else:
        relief = intent.relief + totals.relief_bonus
        tension = apply_tension(tension, modifier.tension_bonus - relief, player.max_tension)
        control += ADJUST_BASE_CONTROL + stats.tactics // 5

    integrity = max(0, min(player.max_line_integrity, player.line_integrity + intent.integrity))

    contract = state.contract
    if grade == TimingGrade.PERFECT:
        if totals.negate_wear_on_perfect:
            flags = flags.model_copy(update={"negate_next_wear": True})
        if contract is not None:
            contract = contract.model_copy(
                update={
                    "stats": contract.stats.model_copy(
                        update={"perfect_count": contract.stats.perfect_count + 1}
                    )
                }
            )

    fish_phase = fish_phase_for(stamina, combat.max_fish_stamina)
    stamina_delta = stamina - combat.fish_stamina

    event: GameEvent
    if fish_phase != combat.fish_phase:
        logger.debug("Fish phase %s -> %s", combat.fish_phase.value, fish_phase.value)
        event = PhaseEvent(phase=fish_phase)
    elif stamina_delta:
        event = StaminaEvent(delta=stamina_delta, phase=fish_phase, reason=intent.action_id)
    else:
        event = TensionEvent(
            delta=tension - player.tension, tension=tension, reason=intent.action_id
        )

    acted = state.model_copy(
        update={
            "player": player.model_copy(update={"tension": tension, "line_integrity": integrity}),
            "combat": combat.model_copy(
                update={
                    "fish_stamina": stamina,
                    "fish_phase": fish_phase,
                    "brace": brace,
                    "control": control,
                    "flags": flags,
                    "phase": TurnOwner.FISH,
                }
            ),
            "contract": contract,
            "last_event": event,
        }
    )
    return acted, event


def use_item(content: ContentBundle, state: GameState, item_id: str) -> GameState:
    """
    Use one item from the inventory.

    Restores integrity and/or reduces tension. Usable in or out of a fight,
    except while the defeat prompt is showing. Mid-fight on the player's
    turn, the fish responds as it would to an action.
    """
    if state.awaiting_defeat_choice:
        return state

    item = content.items.get(item_id)
    if item is None:
        return missing_content(state, "item", item_id)

    player = state.player
    count = player.inventory.get(item_id, 0)
    if count <= 0:
        return soft_fail(state, "No item left.")

    integrity = min(player.max_line_integrity, player.line_integrity + item.integrity_restore)
    tension = apply_tension(player.tension, -item.tension_reduce, player.max_tension)

    event: GameEvent
    if item.integrity_restore > 0:
        event = IntegrityEvent(
            delta=integrity - player.line_integrity, integrity=integrity, reason=item_id
        )
    elif item.tension_reduce > 0:
        event = TensionEvent(delta=tension - player.tension, tension=tension, reason=item_id)
    else:
        event = LogEvent(text=f"Used {item.label or item_id}.")

    used = state.model_copy(
        update={
            "player": player.model_copy(
                update={
                    "line_integrity": integrity,
                    "tension": tension,
                    "inventory": {**player.inventory, item_id: count - 1},
                }
            ),
            "last_event": event,
        }
    )

    combat = used.combat
    if combat is None or combat.phase != TurnOwner.PLAYER:
        return used

    enemy = content.enemies.get(combat.enemy_id)
    if enemy is None:
        return missing_content(state, "enemy", combat.enemy_id)

    used = used.model_copy(update={"combat": combat.model_copy(update={"phase": TurnOwner.FISH})})
    return _fish_turn(content, used, enemy, player.tension, event)


# =============================================================================
# Fish turn
# =============================================================================


def _threshold_grant(
    totals: EffectTotals, turn_start_tension: int, tension: int
) -> int:
    threshold = totals.tension_threshold
    if threshold is None or totals.control_on_threshold <= 0:
        return 0
    if turn_start_tension < threshold <= tension:
        return totals.control_on_threshold
    return 0


def _fish_turn(
    content: ContentBundle,
    state: GameState,
    enemy: EnemyDef,
    turn_start_tension: int,
    carried: GameEvent,
) -> GameState:
    """
    The fish's automatic response.

    Exhausted bleed, pressure (after brace, control and skill/mod dampening),
    the tension-threshold control grant, wear, and the defeat check.
    """
    combat = state.combat
    player = state.player
    stats = effective_stats(content, state)
    totals = collect_effects(content, state)

    stamina = combat.fish_stamina
    if combat.fish_phase == FishPhase.EXHAUSTED and totals.exhausted_bleed > 0:
        stamina = max(0, stamina - totals.exhausted_bleed)
        if stamina <= 0:
            bled = state.model_copy(
                update={"combat": combat.model_copy(update={"fish_stamina": 0})}
            )
            return _resolve_win(content, bled)

    phase_mods = phase_tuning(combat.fish_phase, player.level)
    pressure = max(0.0, enemy.pressure * phase_mods.pressure_mult - combat.brace)
    stat_factor, combat_factor = control_factors(stats.control, combat.control)
    pressure *= stat_factor * combat_factor * totals.fish_tension_mult
    gain = round_half_up(pressure)
    tension = apply_tension(player.tension, gain, player.max_tension)

    control = combat.control
    flags = combat.flags
    grant = _threshold_grant(totals, turn_start_tension, tension)
    if grant and flags.threshold_turn != combat.turn:
        control += grant
        flags = flags.model_copy(update={"threshold_turn": combat.turn})

    safe_limit = safe_tension_limit(content.tuning.tension, control, stats.control)
    if flags.negate_next_wear:
        wear = 0
        flags = flags.model_copy(update={"negate_next_wear": False})
    else:
        wear = compute_wear(tension, safe_limit, stats.durability, totals.wear_mult)
    integrity = max(0, player.line_integrity - wear)

    fish_phase = fish_phase_for(stamina, combat.max_fish_stamina)
    outcome = CombatOutcome.DEFEAT_PROMPT if integrity <= 0 else CombatOutcome.NONE

    event: GameEvent
    if outcome == CombatOutcome.DEFEAT_PROMPT:
        logger.debug("Line snapped on turn %d against %s", combat.turn, enemy.id)
        event = DefeatPromptEvent()
    elif fish_phase != combat.fish_phase:
        event = PhaseEvent(phase=fish_phase)
    elif isinstance(carried, PhaseEvent):
        event = carried
    elif wear > 0:
        event = IntegrityEvent(delta=-wear, integrity=integrity, reason="wear")
    else:
        event = TensionEvent(delta=tension - player.tension, tension=tension, reason="pressure")

    return state.model_copy(
        update={
            "player": player.model_copy(update={"tension": tension, "line_integrity": integrity}),
            "combat": combat.model_copy(
                update={
                    "fish_stamina": stamina,
                    "fish_phase": fish_phase,
                    "brace": 0,
                    "control": control,
                    "flags": flags,
                    "turn": combat.turn + 1,
                    "phase": TurnOwner.PLAYER,
                    "outcome": outcome,
                }
            ),
            "last_event": event,
        }
    )


# =============================================================================
# Terminal transitions
# =============================================================================


def _resolve_win(content: ContentBundle, state: GameState) -> GameState:
    """
    Land the fish.

    Clears the encounter, decays tension to about a third, credits a
    contract fight, and grants the fish's xp.
    """
    combat = state.combat
    enemy = content.enemies.get(combat.enemy_id)
    xp = enemy.xp if enemy is not None else 0

    player = state.player
    tension = round_half_up(player.tension * content.tuning.tension.win_decay)

    contract = state.contract
    if contract is not None:
        contract = contract.model_copy(
            update={
                "stats": contract.stats.model_copy(
                    update={"fights_won": contract.stats.fights_won + 1}
                )
            }
        )

    logger.debug("Landed %s on turn %d", combat.enemy_id, combat.turn)
    landed = state.model_copy(
        update={
            "player": player.model_copy(update={"tension": tension}),
            "combat": None,
            "contract": contract,
            "last_event": XpEvent(amount=xp),
        }
    )
    return grant_xp(content, landed, xp)
