"""
Tests for snapshot migration.
"""

from __future__ import annotations

import pytest

from tideline.content import load_starter_bundle
from tideline.engine.migration import normalize_state
from tideline.engine.run import make_new_run_state
from tideline.models.content import ContentBundle
from tideline.models.event import FishPhase, LogEvent, TimingEvent, TimingGrade
from tideline.models.state import CombatOutcome, ContractPhase, GameState, TurnOwner


@pytest.fixture
def content() -> ContentBundle:
    return load_starter_bundle()


class TestGarbageInput:
    """Tests for input that is not a snapshot at all."""

    def test_non_objects_start_over(self, content: ContentBundle):
        fresh = make_new_run_state(content)
        for raw in (None, 42, "save", [1, 2, 3]):
            assert normalize_state(content, raw) == fresh

    def test_empty_object(self, content: ContentBundle):
        state = normalize_state(content, {})
        assert state.player.level == 1
        assert state.player.line_integrity == 100
        assert state.player.known_actions == ["reel", "brace", "adjust"]
        assert state.progress.region_id == "shore_1"
        assert state.currency == 25

    def test_current_snapshot_passes_through(self, content: ContentBundle):
        fresh = make_new_run_state(content)
        assert normalize_state(content, fresh) == fresh


class TestPlayerMigration:
    """Tests for the player section."""

    def test_legacy_focus_and_hp(self, content: ContentBundle):
        """Test focus maps onto tension and hp onto integrity."""
        raw = {"player": {"focus": 25, "maxFocus": 100, "hp": 15, "maxHp": 30}}
        state = normalize_state(content, raw)
        assert state.player.tension == 75
        assert state.player.line_integrity == 50

    def test_legacy_maxima_default(self, content: ContentBundle):
        """Test old saves without maxFocus/maxHp use the old run defaults of 40 and 80."""
        state = normalize_state(content, {"player": {"focus": 10, "hp": 40}})
        assert state.player.tension == 75
        assert state.player.line_integrity == 50

    def test_full_focus_means_calm(self, content: ContentBundle):
        state = normalize_state(content, {"player": {"focus": 40, "maxFocus": 40}})
        assert state.player.tension == 0

    def test_out_of_range_clamped(self, content: ContentBundle):
        raw = {
            "player": {
                "tension": 500,
                "lineIntegrity": -5,
                "stats": {"control": 250, "power": -3},
                "level": 0,
            }
        }
        state = normalize_state(content, raw)
        assert state.player.tension == 100
        assert state.player.line_integrity == 0
        assert state.player.stats.control == 99
        assert state.player.stats.power == 0
        assert state.player.level == 1

    def test_non_numbers_fall_back(self, content: ContentBundle):
        raw = {"player": {"level": "three", "xp": None, "tension": True}, "currency": "lots"}
        state = normalize_state(content, raw)
        assert state.player.level == 1
        assert state.player.xp == 0
        assert state.player.tension == 0
        assert state.currency == 25

    def test_skills_filtered_and_clamped(self, content: ContentBundle):
        raw = {"player": {"skills": {"steady_hands": 9, "lost_art": 2, "soft_touch": 0}}}
        state = normalize_state(content, raw)
        assert state.player.skills == {"steady_hands": 3}

    def test_derived_fields_recomputed(self, content: ContentBundle):
        raw = {
            "player": {
                "level": 2,
                "skills": {"power_reel_training": 1},
                "knownActions": ["teleport"],
                "maxLineIntegrity": 9999,
            }
        }
        state = normalize_state(content, raw)
        assert state.player.known_actions == ["reel", "brace", "adjust", "power_reel"]
        assert state.player.max_line_integrity == 106

    def test_unspent_points_default_from_level(self, content: ContentBundle):
        raw = {"player": {"level": 3, "stats": {"power": 1}}}
        state = normalize_state(content, raw)
        assert state.player.stat_points == 1
        assert state.player.skill_points == 3


class TestCombatMigration:
    """Tests for the combat section."""

    def test_legacy_enemy_hp_and_turn_owner(self, content: ContentBundle):
        raw = {"combat": {"enemyId": "minnow", "enemyHp": 30, "phase": "ENEMY", "turn": 4}}
        state = normalize_state(content, raw)
        assert state.combat.fish_stamina == 30
        assert state.combat.max_fish_stamina == 80
        assert state.combat.fish_phase == FishPhase.DEFENSIVE
        assert state.combat.phase == TurnOwner.PLAYER
        assert state.combat.turn == 4
        assert state.combat.last_spawn.enemy_id == "minnow"

    def test_missing_enemy_drops_combat(self, content: ContentBundle):
        state = normalize_state(content, {"combat": {"enemyId": "kraken", "fishStamina": 10}})
        assert state.combat is None

    def test_snapped_line_restores_prompt(self, content: ContentBundle):
        raw = {"player": {"lineIntegrity": 0}, "combat": {"enemyId": "minnow"}}
        state = normalize_state(content, raw)
        assert state.combat.outcome == CombatOutcome.DEFEAT_PROMPT


class TestMetaMigration:
    """Tests for currency, rig mods, contracts and the last event."""

    def test_mods_filtered_and_deduplicated(self, content: ContentBundle):
        raw = {"temporaryMods": ["braided_line", "braided_line", "ghost", 7]}
        state = normalize_state(content, raw)
        assert state.temporary_mods == ["braided_line"]
        assert state.player.max_line_integrity == 120

    def test_contract_kept_verbatim(self, content: ContentBundle):
        raw = {
            "contract": {
                "contractId": "shore_run",
                "regionId": "shore_1",
                "encounters": [
                    {"regionId": "shore_1", "enemyId": "bass"},
                    {"regionId": "shore_1", "enemyId": "minnow"},
                ],
                "index": 1,
                "phase": "CAMP",
                "stats": {"fightsWon": 2},
            }
        }
        state = normalize_state(content, raw)
        assert [row.enemy_id for row in state.contract.encounters] == ["bass", "minnow"]
        assert state.contract.index == 1
        assert state.contract.phase == ContractPhase.CAMP
        assert state.contract.stats.fights_won == 2
        assert state.contract.fight_rewards == [0, 0]

    def test_malformed_contract_dropped(self, content: ContentBundle):
        raw = {
            "contract": {
                "contractId": "shore_run",
                "regionId": "shore_1",
                "encounters": [{"regionId": "shore_1"}],
            }
        }
        assert normalize_state(content, raw).contract is None

    def test_last_event(self, content: ContentBundle):
        good = normalize_state(content, {"lastEvent": {"type": "LOG", "text": "hi"}})
        assert good.last_event == LogEvent(text="hi")
        bad = normalize_state(content, {"lastEvent": {"type": "NOPE"}})
        assert bad.last_event is None

    def test_stored_timing_event_loads(self, content: ContentBundle):
        state = normalize_state(content, {"lastEvent": {"type": "TIMING", "grade": "PERFECT"}})
        assert state.last_event == TimingEvent(grade=TimingGrade.PERFECT)

    def test_never_raises(self, content: ContentBundle):
        """Test deeply wrong shapes still produce a valid snapshot."""
        raw = {
            "player": [],
            "progress": "shore",
            "combat": 5,
            "contract": {"encounters": "many"},
            "temporaryMods": {"a": 1},
        }
        state = normalize_state(content, raw)
        assert isinstance(state, GameState)
        assert state.combat is None
        assert state.contract is None
