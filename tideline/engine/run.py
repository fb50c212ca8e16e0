"""
Run Lifecycle for Tideline.

Creating, restarting and routing a run between regions.
"""

from __future__ import annotations

import logging

from tideline.engine.progression import refresh_derived
from tideline.engine.snapshot import missing_content, soft_fail
from tideline.models.content import ContentBundle
from tideline.models.event import LogEvent
from tideline.models.state import GameState, PlayerState, Progress
from tideline.skills.progression import skill_point_pool, stat_point_pool, xp_for_level

logger = logging.getLogger(__name__)


def make_new_run_state(content: ContentBundle) -> GameState:
    """
    Build a fresh level-1 run.

    Starts in the bundle's first region with the loadout's actions and
    items, the economy's starting currency, full line integrity and zero
    tension.
    """
    tuning = content.tuning
    player = PlayerState(
        level=1,
        xp=0,
        xp_to_next=xp_for_level(content.xp_curve, 1),
        stat_points=stat_point_pool(tuning.progression, 1),
        skill_points=skill_point_pool(tuning.progression, 1),
        tension=0,
        max_tension=tuning.tension.max_tension,
        inventory={item_id: count for item_id, count in content.loadout.start_items.items() if count > 0},
    )
    state = GameState(
        progress=Progress(region_id=content.first_region_id() or ""),
        player=player,
        currency=content.economy.starting_currency,
        last_event=LogEvent(text="New run started."),
    )
    return refresh_derived(content, state, heal=True)


def restart_run(content: ContentBundle) -> GameState:
    """Throw the current run away and start over."""
    logger.debug("Run restarted")
    return make_new_run_state(content).model_copy(
        update={"last_event": LogEvent(text="Run restarted.")}
    )


def set_region(content: ContentBundle, state: GameState, region_id: str) -> GameState:
    """
    Travel to another region.

    Rejected mid-fight, during a contract, or below the region's level.
    """
    region = content.regions.get(region_id)
    if region is None:
        return missing_content(state, "region", region_id)
    if state.combat is not None:
        return soft_fail(state, "Can't travel mid-fight.")
    if state.contract is not None:
        return soft_fail(state, "Can't travel during a contract.")
    if state.player.level < region.required_level:
        return soft_fail(state, f"Region locked: level {region.required_level}+")

    return state.model_copy(
        update={
            "progress": state.progress.model_copy(update={"region_id": region_id}),
            "last_event": LogEvent(text=f"Travelled to {region.name or region_id}."),
        }
    )
