"""
Tests for contracts: pre-rolled encounter runs with camp shops.
"""

from __future__ import annotations

import copy
import random

import pytest

from tideline.content import STARTER_BUNDLE, load_starter_bundle
from tideline.engine.combat import apply_action, flee, retry_fight, start_fight
from tideline.engine.contract import (
    advance_contract_after_fight,
    buy_from_shop,
    camp_shop_id,
    continue_contract,
    end_contract,
    start_contract,
)
from tideline.engine.migration import normalize_state
from tideline.engine.run import make_new_run_state
from tideline.models.content import ContentBundle, load_content
from tideline.models.event import (
    ContractEvent,
    FishPhase,
    LogEvent,
    PurchaseEvent,
    SpawnEvent,
    TimingGrade,
)
from tideline.models.state import CombatOutcome, ContractPhase, Encounter, GameState
from tideline.skills.resources import max_line_integrity


class FirstPick(random.Random):
    """Always picks the first pool row and the low end of every range."""

    def random(self) -> float:
        return 0.0

    def randint(self, a: int, b: int) -> int:
        return a


@pytest.fixture
def content() -> ContentBundle:
    return load_starter_bundle()


@pytest.fixture
def run(content: ContentBundle) -> GameState:
    return make_new_run_state(content)


@pytest.fixture
def two_shops() -> ContentBundle:
    """Starter content plus a second shop no contract camps at."""
    data = copy.deepcopy(STARTER_BUNDLE)
    data["shops"]["black_market"] = {
        "label": "Black Market",
        "stock": [{"kind": "ITEM", "id": "cheap_kit", "itemId": "patch_kit", "price": 1}],
    }
    return load_content(data)


@pytest.fixture
def contract(content: ContentBundle, run: GameState) -> GameState:
    """The shore run: two minnows, 10 currency per fight, 40 on completion."""
    return start_contract(content, run, "shore_run", rng=FirstPick())


def land_fish(content: ContentBundle, state: GameState) -> GameState:
    """Win the current encounter with one reel."""
    combat = state.combat.model_copy(
        update={"fish_stamina": 1, "fish_phase": FishPhase.EXHAUSTED}
    )
    nearly_landed = state.model_copy(update={"combat": combat})
    return apply_action(content, nearly_landed, "reel", TimingGrade.GOOD)


def at_camp(content: ContentBundle, contract: GameState) -> GameState:
    return advance_contract_after_fight(content, land_fish(content, contract))


class TestStartContract:
    """Tests for starting a contract."""

    def test_pre_rolls_everything(self, contract: GameState):
        run = contract.contract
        assert run.contract_id == "shore_run"
        assert run.region_id == "shore_1"
        assert run.encounters == [
            Encounter(region_id="shore_1", enemy_id="minnow"),
            Encounter(region_id="shore_1", enemy_id="minnow"),
        ]
        assert run.fight_rewards == [10, 10]
        assert run.final_reward == 40
        assert run.index == 0
        assert run.phase == ContractPhase.FIGHT

    def test_spawns_first_encounter(self, contract: GameState):
        assert contract.combat.enemy_id == "minnow"
        assert contract.progress.region_id == "shore_1"
        assert contract.last_event == SpawnEvent(region_id="shore_1", enemy_id="minnow")

    def test_seeded_contracts_repeat(self, content: ContentBundle, run: GameState):
        first = start_contract(content, run, "shore_run", rng=random.Random(11))
        second = start_contract(content, run, "shore_run", rng=random.Random(11))
        assert first.contract == second.contract

    def test_contract_pool_overrides_region(self, content: ContentBundle, run: GameState):
        player = run.player.model_copy(update={"level": 3})
        result = start_contract(
            content, run.model_copy(update={"player": player}), "reef_bounty", rng=random.Random(2)
        )
        assert {row.enemy_id for row in result.contract.encounters} == {"scrapjaw"}
        assert 3 <= len(result.contract.encounters) <= 4

    def test_level_gate(self, content: ContentBundle, run: GameState):
        result = start_contract(content, run, "reef_bounty")
        assert result.contract is None
        assert result.last_event == LogEvent(text="Region locked: level 3+")

    def test_rejected_in_combat(self, content: ContentBundle, run: GameState):
        fight = start_fight(content, run, rng=FirstPick())
        result = start_contract(content, fight, "shore_run")
        assert result.contract is None
        assert result.last_event == LogEvent(text="Finish the current fight first.")

    def test_rejected_when_active(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        result = start_contract(content, camp, "shore_run")
        assert result.contract == camp.contract
        assert result.last_event == LogEvent(text="A contract is already in progress.")

    def test_missing_contract(self, content: ContentBundle, run: GameState):
        result = start_contract(content, run, "whale_hunt")
        assert result.last_event == LogEvent(text="Missing contract: whale_hunt")

    def test_perfect_timing_counted(self, content: ContentBundle, contract: GameState):
        result = apply_action(content, contract, "reel", TimingGrade.PERFECT)
        assert result.contract.stats.perfect_count == 1

    def test_stable_under_reload(self, content: ContentBundle, contract: GameState):
        """Test a persisted contract reloads with the same encounters, index and phase."""
        raw = contract.model_dump(by_alias=True, mode="json")
        reloaded = normalize_state(content, raw)
        assert reloaded.contract == contract.contract
        assert reloaded.combat == contract.combat
        assert reloaded == contract


class TestContractFlow:
    """Tests for FIGHT -> CAMP -> FIGHT -> SUMMARY."""

    def test_advance_to_camp(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)

        assert camp.contract.phase == ContractPhase.CAMP
        assert camp.contract.stats.fights_won == 1
        assert camp.currency == 35
        assert camp.contract.earned.currency == 10
        assert camp.contract.last_reward.currency == 10
        assert camp.last_event == ContractEvent(contract_id="shore_run", phase="CAMP", index=0)

    def test_advance_mid_fight(self, content: ContentBundle, contract: GameState):
        result = advance_contract_after_fight(content, contract)
        assert result.contract == contract.contract
        assert result.last_event == LogEvent(text="The fight is still on.")

    def test_full_run(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        second = continue_contract(content, camp)
        assert second.contract.index == 1
        assert second.contract.phase == ContractPhase.FIGHT
        assert second.combat.enemy_id == "minnow"

        summary = advance_contract_after_fight(content, land_fish(content, second))
        assert summary.contract.phase == ContractPhase.SUMMARY
        assert summary.contract.last_reward.currency == 50
        assert summary.contract.earned.currency == 60
        assert summary.currency == 85

        assert continue_contract(content, summary).last_event == LogEvent(
            text="Nothing to continue."
        )

        ended = end_contract(content, summary)
        assert ended.contract is None
        assert ended.currency == 85
        assert ended.last_event == ContractEvent(contract_id="shore_run", phase="ENDED", index=1)

    def test_flee_then_respawn(self, content: ContentBundle, contract: GameState):
        fled = flee(contract)
        result = advance_contract_after_fight(content, fled)
        assert result.last_event == LogEvent(text="This encounter has not been won.")

        respawned = continue_contract(content, fled)
        assert respawned.combat.enemy_id == "minnow"
        assert respawned.combat.fish_stamina == 80
        assert respawned.contract.index == 0

    def test_end_from_camp(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        ended = end_contract(content, camp)
        assert ended.contract is None
        assert ended.currency == camp.currency

    def test_end_mid_fight_rejected(self, content: ContentBundle, contract: GameState):
        result = end_contract(content, contract)
        assert result.contract == contract.contract


class TestContractDefeat:
    """Tests for losing a fight mid-contract."""

    def test_retry_keeps_contract_and_currency(self, content: ContentBundle, contract: GameState):
        player = contract.player.model_copy(update={"tension": 90, "line_integrity": 1})
        state = contract.model_copy(update={"player": player, "currency": 55})
        lost = apply_action(content, state, "reel", TimingGrade.GOOD)
        assert lost.combat.outcome == CombatOutcome.DEFEAT_PROMPT

        result = retry_fight(content, lost)

        assert result.combat.outcome == CombatOutcome.NONE
        assert result.combat.enemy_id == contract.contract.current_encounter.enemy_id
        assert result.contract == lost.contract
        assert result.contract.stats.fights_won == 0
        assert result.currency == 55


class TestShop:
    """Tests for buying at camp."""

    def test_buy_item(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        result = buy_from_shop(content, camp, "camp_shop", "calm_tea_2")

        assert result.currency == 23
        assert result.player.inventory["calm_tea"] == 3
        assert result.last_event == PurchaseEvent(
            shop_id="camp_shop", stock_id="calm_tea_2", price=12
        )

    def test_cannot_afford(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        result = buy_from_shop(content, camp, "camp_shop", "braided_line")
        assert result.currency == camp.currency
        assert result.temporary_mods == []
        assert result.last_event == LogEvent(text="Not enough currency.")

    def test_buy_rig_mod(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract).model_copy(update={"currency": 100})
        result = buy_from_shop(content, camp, "camp_shop", "braided_line")

        assert result.currency == 60
        assert result.temporary_mods == ["braided_line"]
        assert result.player.max_line_integrity == camp.player.max_line_integrity + 20

        again = buy_from_shop(content, result, "camp_shop", "braided_line")
        assert again.currency == 60
        assert again.temporary_mods == ["braided_line"]
        assert again.last_event == LogEvent(text="Already installed.")

    def test_mods_removed_with_contract(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract).model_copy(update={"currency": 100})
        modded = buy_from_shop(content, camp, "camp_shop", "braided_line")
        ended = end_contract(content, modded)

        assert ended.temporary_mods == []
        assert ended.player.max_line_integrity == max_line_integrity(
            content.tuning.integrity, ended.player.level, 0
        )

    def test_only_at_camp(self, content: ContentBundle, contract: GameState, run: GameState):
        assert buy_from_shop(content, contract, "camp_shop", "calm_tea_2").last_event == LogEvent(
            text="Shops are only open at camp."
        )
        assert buy_from_shop(content, run, "camp_shop", "calm_tea_2").currency == run.currency

    def test_missing_stock(self, content: ContentBundle, contract: GameState):
        camp = at_camp(content, contract)
        result = buy_from_shop(content, camp, "camp_shop", "golden_reel")
        assert result.last_event == LogEvent(text="Missing stock: golden_reel")

    def test_other_shop_rejected(self, two_shops: ContentBundle, run: GameState):
        """Test only the contract's own camp shop sells."""
        started = start_contract(two_shops, run, "shore_run", rng=FirstPick())
        camp = at_camp(two_shops, started)
        result = buy_from_shop(two_shops, camp, "black_market", "cheap_kit")

        assert result.currency == camp.currency
        assert result.player.inventory == camp.player.inventory
        assert result.last_event == LogEvent(text="black_market is not open at this camp.")

    def test_camp_shop_falls_back_to_economy_default(self, run: GameState):
        data = copy.deepcopy(STARTER_BUNDLE)
        data["shops"]["black_market"] = {
            "stock": [{"kind": "ITEM", "id": "cheap_kit", "itemId": "patch_kit", "price": 1}],
        }
        del data["contracts"]["shore_run"]["camp"]
        data["economy"]["defaultShopId"] = "black_market"
        content = load_content(data)

        camp = at_camp(content, start_contract(content, run, "shore_run", rng=FirstPick()))
        assert camp_shop_id(content, camp.contract) == "black_market"

        result = buy_from_shop(content, camp, "black_market", "cheap_kit")
        assert result.currency == camp.currency - 1
        assert result.player.inventory["patch_kit"] == camp.player.inventory["patch_kit"] + 1
        assert buy_from_shop(content, camp, "camp_shop", "calm_tea_2").last_event == LogEvent(
            text="camp_shop is not open at this camp."
        )

    def test_no_camp_shop_without_contract(self, content: ContentBundle):
        assert camp_shop_id(content, None) is None
