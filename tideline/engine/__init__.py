"""
Core Engine for Tideline.

Every entry point is a pure transition `(content, state, ...) -> state`:
- Run lifecycle (new run, restart, travel)
- Snapshot migration (normalizing persisted or legacy snapshots)
- Combat (spawn, player action, fish response, retry, flee)
- Progression (xp, stat points, skills, respec)
- Contracts (pre-rolled encounter runs, camp shops)

A rejected call returns the input state with a LOG event; it never raises.
"""

from __future__ import annotations

from tideline.engine.combat import apply_action, flee, retry_fight, start_fight, use_item
from tideline.engine.contract import (
    advance_contract_after_fight,
    buy_from_shop,
    camp_shop_id,
    continue_contract,
    end_contract,
    start_contract,
)
from tideline.engine.intent import ActionIntent, IntentKind, resolve_intent
from tideline.engine.migration import normalize_state
from tideline.engine.progression import (
    grant_xp,
    refresh_derived,
    respec,
    spend_stat_point,
    unlock_skill,
)
from tideline.engine.run import make_new_run_state, restart_run, set_region

__all__ = [
    # Run
    "make_new_run_state",
    "restart_run",
    "set_region",
    "normalize_state",
    # Combat
    "start_fight",
    "apply_action",
    "use_item",
    "retry_fight",
    "flee",
    # Intent
    "ActionIntent",
    "IntentKind",
    "resolve_intent",
    # Progression
    "grant_xp",
    "spend_stat_point",
    "unlock_skill",
    "respec",
    "refresh_derived",
    # Contracts
    "start_contract",
    "advance_contract_after_fight",
    "continue_contract",
    "end_contract",
    "buy_from_shop",
    "camp_shop_id",
]
