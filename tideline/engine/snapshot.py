"""
Snapshot helpers shared by the engine entry points.

Soft failure is the engine's only error posture: a rejected call returns the
input snapshot unchanged apart from a LOG event.
"""

from __future__ import annotations

import logging

from tideline.models.content import EnemyDef
from tideline.models.event import GameEvent, LogEvent
from tideline.models.state import CombatState, GameState, Spawn, TurnOwner
from tideline.skills.resources import fish_phase_for

logger = logging.getLogger(__name__)


def with_event(state: GameState, event: GameEvent) -> GameState:
    return state.model_copy(update={"last_event": event})


def soft_fail(state: GameState, text: str) -> GameState:
    """Reject a player action: same snapshot, explanatory log event."""
    logger.info("Rejected: %s", text)
    return with_event(state, LogEvent(text=text))


def missing_content(state: GameState, kind: str, content_id: str) -> GameState:
    """Fail soft on a reference to content that does not exist."""
    logger.warning("Missing %s: %s", kind, content_id)
    return with_event(state, LogEvent(text=f"Missing {kind}: {content_id}"))


def fresh_combat(region_id: str, enemy: EnemyDef) -> CombatState:
    """A new encounter: player's turn, turn 1, fish at full stamina."""
    return CombatState(
        enemy_id=enemy.id,
        fish_stamina=enemy.stamina,
        max_fish_stamina=enemy.stamina,
        fish_phase=fish_phase_for(enemy.stamina, enemy.stamina),
        phase=TurnOwner.PLAYER,
        turn=1,
        last_spawn=Spawn(region_id=region_id, enemy_id=enemy.id),
    )
