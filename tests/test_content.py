"""
Tests for content bundle loading, including combat-era exports.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tideline.content import STARTER_BUNDLE, load_starter_bundle
from tideline.models.content import (
    ActionKind,
    ContentBundle,
    ControlOnTensionEffect,
    ItemStock,
    RigModStock,
    StatBonusEffect,
    load_content,
)


@pytest.fixture
def content() -> ContentBundle:
    return load_starter_bundle()


class TestBundleLoading:
    """Tests for loading authored JSON."""

    def test_ids_filled_from_keys(self, content: ContentBundle):
        """Test records without an id take their dictionary key."""
        assert content.enemies["minnow"].id == "minnow"
        assert content.regions["shore_1"].id == "shore_1"
        assert content.rig_mods["braided_line"].id == "braided_line"

    def test_camel_case_fields(self, content: ContentBundle):
        """Test camelCase keys land on snake_case attributes."""
        assert content.regions["reef_2"].required_level == 3
        assert content.economy.starting_currency == 25
        assert content.contracts["shore_run"].camp.shop_id == "camp_shop"

    def test_tuning_defaults(self, content: ContentBundle):
        """Test an omitted tuning table falls back to defaults."""
        assert content.tuning.tension.max_tension == 100
        assert content.tuning.tension.safe_base == 58
        assert content.tuning.integrity.base == 100
        assert content.tuning.progression.start_skill_points == 1

    def test_partial_tuning_override(self):
        """Test authors can override a single tuning value."""
        content = load_content({"tuning": {"tension": {"safeBase": 60}}})
        assert content.tuning.tension.safe_base == 60
        assert content.tuning.tension.safe_max == 86

    def test_first_region(self, content: ContentBundle):
        assert content.first_region_id() == "shore_1"
        assert ContentBundle().first_region_id() is None

    def test_bad_bundle_raises(self):
        """Test a malformed bundle fails validation at load time."""
        with pytest.raises(ValidationError):
            load_content({"regions": {"x": {"requiredLevel": "high"}}})

    def test_starter_bundle_is_plain_data(self):
        """Test the starter bundle dict is left untouched by loading."""
        load_starter_bundle()
        assert "id" not in STARTER_BUNDLE["enemies"]["minnow"]


class TestLegacyRecords:
    """Tests for combat-era records folded at load time."""

    def test_enemy_max_hp_and_attack(self, content: ContentBundle):
        """Test maxHp/attack become stamina/pressure."""
        scrapjaw = content.enemies["scrapjaw"]
        assert scrapjaw.stamina == 150
        assert scrapjaw.pressure == 18

    def test_canonical_fields_win(self):
        """Test canonical fields are kept when both shapes are present."""
        content = load_content(
            {"enemies": {"eel": {"stamina": 60, "maxHp": 999, "pressure": 9, "attack": 1}}}
        )
        assert content.enemies["eel"].stamina == 60
        assert content.enemies["eel"].pressure == 9

    def test_item_heal(self, content: ContentBundle):
        """Test legacy item heal becomes an integrity restore."""
        assert content.items["small_potion"].integrity_restore == 20

    def test_legacy_action_kinds(self, content: ContentBundle):
        assert content.actions["strike"].kind == ActionKind.ATTACK
        assert content.actions["strike"].is_legacy
        assert not content.actions["reel"].is_legacy


class TestTaggedUnions:
    """Tests for effect and stock unions."""

    def test_skill_effects(self, content: ContentBundle):
        effect = content.skills["redline_focus"].effects[0]
        assert isinstance(effect, ControlOnTensionEffect)
        assert effect.threshold == 70

    def test_rig_mod_effects(self, content: ContentBundle):
        effect = content.rig_mods["braided_line"].effects[0]
        assert isinstance(effect, StatBonusEffect)
        assert effect.stat == "durability"

    def test_shop_stock(self, content: ContentBundle):
        stock = content.shops["camp_shop"].stock
        assert isinstance(stock[0], ItemStock)
        assert stock[1].amount == 2
        assert isinstance(stock[2], RigModStock)

    def test_unknown_effect_kind_rejected(self):
        with pytest.raises(ValidationError):
            load_content({"skills": {"odd": {"effects": [{"kind": "TELEPORT"}]}}})
