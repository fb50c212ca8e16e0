"""
Contract/Meta Resolver for Tideline.

A contract is a finite run of encounters in one region:

    FIGHT -> CAMP -> FIGHT -> ... -> FIGHT -> SUMMARY

Everything random about a contract (how many fights, which fish, every
currency reward) is rolled once at start and stored in the snapshot, so a
saved and reloaded contract plays out identically.
"""

from __future__ import annotations

import logging
import random

from tideline.engine.progression import refresh_derived
from tideline.engine.snapshot import fresh_combat, missing_content, soft_fail
from tideline.models.content import ContentBundle, ItemStock, RigModStock
from tideline.models.event import ContractEvent, PurchaseEvent, SpawnEvent
from tideline.models.state import (
    ContractPhase,
    ContractReward,
    ContractRun,
    Encounter,
    GameState,
)
from tideline.skills.dice import default_rng, pick_weighted, roll_range

logger = logging.getLogger(__name__)

MIN_ENCOUNTERS = 1


def _spawn_encounter(content: ContentBundle, state: GameState, contract: ContractRun) -> GameState:
    encounter = contract.current_encounter
    enemy = content.enemies.get(encounter.enemy_id)
    if enemy is None:
        return missing_content(state, "enemy", encounter.enemy_id)

    return state.model_copy(
        update={
            "contract": contract,
            "combat": fresh_combat(encounter.region_id, enemy),
            "progress": state.progress.model_copy(update={"region_id": encounter.region_id}),
            "last_event": SpawnEvent(region_id=encounter.region_id, enemy_id=enemy.id),
        }
    )


def start_contract(
    content: ContentBundle,
    state: GameState,
    contract_id: str,
    rng: random.Random | None = None,
) -> GameState:
    """
    Start a contract and spawn its first encounter.

    Pre-rolls the encounter count, each encounter's fish (from the
    contract's pool, else the region's), every per-fight reward and the
    final reward.

    Args:
        content: Content bundle
        state: Current snapshot
        contract_id: Contract to start
        rng: Random source (defaults to system randomness)

    Returns:
        New snapshot in the contract's first FIGHT
    """
    if state.combat is not None:
        return soft_fail(state, "Finish the current fight first.")
    if state.contract is not None:
        return soft_fail(state, "A contract is already in progress.")

    definition = content.contracts.get(contract_id)
    if definition is None:
        return missing_content(state, "contract", contract_id)
    region = content.regions.get(definition.region_id)
    if region is None:
        return missing_content(state, "region", definition.region_id)
    if state.player.level < region.required_level:
        return soft_fail(state, f"Region locked: level {region.required_level}+")

    pool = definition.encounter_pool if definition.encounter_pool is not None else region.encounter_pool
    if not pool:
        return soft_fail(state, f"Contract {contract_id} has no encounters.")
    for row in pool:
        if row.enemy_id not in content.enemies:
            return missing_content(state, "enemy", row.enemy_id)

    rng = rng or default_rng()
    count = max(MIN_ENCOUNTERS, roll_range(definition.encounter_count, rng))
    encounters = [
        Encounter(region_id=region.id, enemy_id=pick_weighted(pool, rng)) for _ in range(count)
    ]
    per_fight = definition.rewards_per_fight.currency if definition.rewards_per_fight else None
    final = definition.rewards.currency if definition.rewards else None
    fight_rewards = [roll_range(per_fight, rng) for _ in encounters]
    final_reward = roll_range(final, rng)

    contract = ContractRun(
        contract_id=contract_id,
        region_id=region.id,
        encounters=encounters,
        fight_rewards=fight_rewards,
        final_reward=final_reward,
    )
    logger.debug("Contract %s rolled %d encounters", contract_id, count)
    return _spawn_encounter(content, state, contract)


def advance_contract_after_fight(content: ContentBundle, state: GameState) -> GameState:
    """
    Pay out the fight just won and move to CAMP, or to SUMMARY after the
    last encounter (which also pays the final reward).
    """
    contract = state.contract
    if contract is None:
        return soft_fail(state, "No contract in progress.")
    if contract.phase != ContractPhase.FIGHT:
        return soft_fail(state, "Not in a contract fight.")
    if state.combat is not None:
        return soft_fail(state, "The fight is still on.")
    if not contract.current_fight_won:
        return soft_fail(state, "This encounter has not been won.")

    reward = contract.fight_rewards[contract.index] if contract.index < len(contract.fight_rewards) else 0
    if contract.is_last_encounter:
        reward += contract.final_reward
        phase = ContractPhase.SUMMARY
    else:
        phase = ContractPhase.CAMP

    contract = contract.model_copy(
        update={
            "phase": phase,
            "earned": ContractReward(currency=contract.earned.currency + reward),
            "last_reward": ContractReward(currency=reward),
        }
    )
    logger.debug("Contract %s -> %s", contract.contract_id, phase.value)
    return state.model_copy(
        update={
            "contract": contract,
            "currency": state.currency + reward,
            "last_event": ContractEvent(
                contract_id=contract.contract_id, phase=phase.value, index=contract.index
            ),
        }
    )


def continue_contract(content: ContentBundle, state: GameState) -> GameState:
    """
    Leave camp for the next encounter.

    In FIGHT phase with the current encounter not won (after fleeing it),
    respawns that encounter instead.
    """
    contract = state.contract
    if contract is None:
        return soft_fail(state, "No contract in progress.")
    if state.combat is not None:
        return soft_fail(state, "The fight is still on.")

    if contract.phase == ContractPhase.CAMP:
        if contract.is_last_encounter:
            return soft_fail(state, "No encounters left.")
        contract = contract.model_copy(
            update={"index": contract.index + 1, "phase": ContractPhase.FIGHT}
        )
        return _spawn_encounter(content, state, contract)

    if contract.phase == ContractPhase.FIGHT and not contract.current_fight_won:
        return _spawn_encounter(content, state, contract)

    return soft_fail(state, "Nothing to continue.")


def end_contract(content: ContentBundle, state: GameState) -> GameState:
    """
    Close the contract (abort from camp, or leave the summary).

    Temporary rig mods come off with it. Earned currency stays.
    """
    contract = state.contract
    if contract is None:
        return soft_fail(state, "No contract in progress.")
    if state.combat is not None:
        return soft_fail(state, "The fight is still on.")

    logger.debug("Contract %s ended in %s", contract.contract_id, contract.phase.value)
    ended = state.model_copy(
        update={
            "contract": None,
            "temporary_mods": [],
            "last_event": ContractEvent(
                contract_id=contract.contract_id, phase="ENDED", index=contract.index
            ),
        }
    )
    return refresh_derived(content, ended)


def camp_shop_id(content: ContentBundle, contract: ContractRun | None) -> str | None:
    """The shop open at this contract's camp: its own, else the economy default."""
    if contract is None:
        return None
    definition = content.contracts.get(contract.contract_id)
    if definition is not None and definition.camp is not None and definition.camp.shop_id:
        return definition.camp.shop_id
    return content.economy.default_shop_id


def buy_from_shop(
    content: ContentBundle,
    state: GameState,
    shop_id: str,
    stock_id: str,
) -> GameState:
    """
    Buy one stock row from the camp's shop.

    Items add `amount` to the inventory. Rig mods are owned or not: buying
    one already installed is rejected.
    """
    contract = state.contract
    if contract is None or contract.phase != ContractPhase.CAMP:
        return soft_fail(state, "Shops are only open at camp.")
    if shop_id != camp_shop_id(content, contract):
        return soft_fail(state, f"{shop_id} is not open at this camp.")

    shop = content.shops.get(shop_id)
    if shop is None:
        return missing_content(state, "shop", shop_id)
    row = next((stock for stock in shop.stock if stock.id == stock_id), None)
    if row is None:
        return missing_content(state, "stock", stock_id)

    player = state.player
    update: dict = {}
    if isinstance(row, ItemStock):
        if row.item_id not in content.items:
            return missing_content(state, "item", row.item_id)
        inventory = {**player.inventory, row.item_id: player.inventory.get(row.item_id, 0) + row.amount}
        update["player"] = player.model_copy(update={"inventory": inventory})
    elif isinstance(row, RigModStock):
        if row.mod_id not in content.rig_mods:
            return missing_content(state, "rig mod", row.mod_id)
        if row.mod_id in state.temporary_mods:
            return soft_fail(state, "Already installed.")
        update["temporary_mods"] = [*state.temporary_mods, row.mod_id]

    if state.currency < row.price:
        return soft_fail(state, "Not enough currency.")

    update["currency"] = state.currency - row.price
    update["last_event"] = PurchaseEvent(shop_id=shop_id, stock_id=stock_id, price=row.price)
    bought = state.model_copy(update=update)
    if isinstance(row, RigModStock):
        bought = refresh_derived(content, bought)
    return bought
