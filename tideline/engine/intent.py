"""
Action Intent Resolution for Tideline.

Turns an authored action, in whichever shape it was exported, into one
canonical intent. This is the only place that knows legacy action fields
exist; the combat resolver works purely on ActionIntent.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from tideline.models.content import ActionDef, ActionKind
from tideline.skills.resources import round_half_up

# Legacy attack: tension = base + strain * rate, strain being focusCost
LEGACY_ATTACK_TENSION_BASE = 12
LEGACY_STRAIN_RATE = 0.7
# Legacy utility: brace at or above this focusGain, else adjust
LEGACY_BRACE_FOCUS_GAIN = 14
LEGACY_RELIEF_RATE = 0.6
# Utility authored with deltas: brace at or above this relief, else adjust
UTILITY_BRACE_RELIEF = 8


class IntentKind(str, Enum):
    """Canonical things an action can do."""

    REEL = "reel"
    BRACE = "brace"
    ADJUST = "adjust"
    TECHNIQUE = "technique"


class ActionIntent(BaseModel):
    """Canonical, shape-independent interpretation of an action."""

    action_id: str
    kind: IntentKind
    stamina_take: int = Field(default=0, ge=0, description="Base stamina taken from the fish")
    tension: int = Field(default=0, description="Tension cost (reel/technique)")
    relief: int = Field(default=0, ge=0, description="Tension relief (brace/adjust)")
    integrity: int = Field(default=0, description="Integrity repaired (+) or worn (-)")
    timed: bool = True


def _canonical_intent(action: ActionDef) -> ActionIntent:
    tension_delta = action.tension_delta or 0
    if action.kind == ActionKind.ATTACK:
        kind = IntentKind.REEL
    elif action.kind == ActionKind.UTILITY:
        relief = max(0, -tension_delta)
        kind = IntentKind.BRACE if relief >= UTILITY_BRACE_RELIEF else IntentKind.ADJUST
    else:
        kind = IntentKind(action.kind.value)

    if kind in (IntentKind.REEL, IntentKind.TECHNIQUE):
        tension, relief = tension_delta, 0
    else:
        tension, relief = 0, max(0, -tension_delta)

    return ActionIntent(
        action_id=action.id,
        kind=kind,
        stamina_take=max(0, -(action.stamina_delta or 0)),
        tension=tension,
        relief=relief,
        integrity=action.integrity_delta or 0,
        timed=action.timing != "none",
    )


def _legacy_intent(action: ActionDef) -> ActionIntent:
    heal = max(0, action.heal or 0)

    if action.kind in (ActionKind.ATTACK, ActionKind.REEL, ActionKind.TECHNIQUE):
        strain = max(0, action.focus_cost or 0)
        kind = IntentKind.TECHNIQUE if action.kind == ActionKind.TECHNIQUE else IntentKind.REEL
        return ActionIntent(
            action_id=action.id,
            kind=kind,
            stamina_take=max(0, action.damage or 0),
            tension=LEGACY_ATTACK_TENSION_BASE + round_half_up(strain * LEGACY_STRAIN_RATE),
            integrity=heal,
            timed=action.timing != "none",
        )

    focus_gain = max(0, action.focus_gain or 0)
    if action.kind in (ActionKind.BRACE, ActionKind.ADJUST):
        kind = IntentKind(action.kind.value)
    elif focus_gain >= LEGACY_BRACE_FOCUS_GAIN:
        kind = IntentKind.BRACE
    else:
        kind = IntentKind.ADJUST
    return ActionIntent(
        action_id=action.id,
        kind=kind,
        relief=round_half_up(focus_gain * LEGACY_RELIEF_RATE),
        integrity=heal,
        timed=action.timing != "none",
    )


def resolve_intent(action: ActionDef) -> ActionIntent:
    """
    Resolve an action definition into its canonical intent.

    Any staminaDelta/tensionDelta/integrityDelta present means the deltas
    are read directly, whatever the kind (attack reads as reel, utility as
    brace or adjust by relief). Otherwise the combat-era fields are mapped:
    - attack -> reel taking `damage` stamina, tension 12 + round(focusCost * 0.7)
    - utility -> brace when focusGain >= 14, otherwise adjust, relieving
      round(focusGain * 0.6) tension

    Legacy `heal` becomes an integrity repair.

    Args:
        action: The authored action

    Returns:
        The canonical ActionIntent
    """
    if action.is_legacy:
        return _legacy_intent(action)
    return _canonical_intent(action)
