"""
Content Bundle Models for Tideline.

The content bundle is the declarative, author-supplied half of every engine
call: regions, fish, actions, items, skills, rig mods, shops, contracts and
balance tuning. It is immutable once loaded.

Bundles are authored as camelCase JSON (the shape the content editor exports).
Older exports that still use the combat-era fields (maxHp/attack, damage/heal,
focusCost/focusGain) are folded into the fishing model when a record loads.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

StatName = Literal["control", "power", "durability", "precision", "tactics"]

STAT_NAMES: tuple[str, ...] = ("control", "power", "durability", "precision", "tactics")


class ContentModel(BaseModel):
    """Base for all content records: camelCase aliases, immutable."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    """Return the first non-None value among keys, or None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


# =============================================================================
# Tuning (balance configuration)
# =============================================================================


class TensionTuning(ContentModel):
    """Tension meter and safe-limit configuration."""

    max_tension: int = Field(default=100, ge=1, description="Tension ceiling")
    safe_base: int = Field(default=58, description="Safe tension limit before bonuses")
    safe_min: int = Field(default=50, description="Lowest possible safe limit")
    safe_max: int = Field(default=86, description="Highest possible safe limit")
    safe_per_combat_control: float = Field(
        default=2.0, description="Safe limit gained per point of combat control"
    )
    safe_per_control: float = Field(
        default=1.0, description="Safe limit gained per point of the control stat"
    )
    win_decay: float = Field(
        default=0.35, ge=0.0, le=1.0, description="Fraction of tension kept after a catch"
    )


class IntegrityTuning(ContentModel):
    """Derivation of max line integrity."""

    base: int = Field(default=100, description="Integrity at level 1 with no durability")
    per_level: int = Field(default=6, description="Integrity gained per level above 1")
    per_durability: int = Field(default=5, description="Integrity gained per durability point")
    min: int = Field(default=60, description="Lower clamp")
    max: int = Field(default=260, description="Upper clamp")


class TimingTuning(ContentModel):
    """Timing bar radii, measured as distance from the bar's center."""

    base_perfect: float = 0.06
    perfect_per_precision: float = 0.006
    base_good: float = 0.18
    good_per_control: float = 0.008
    good_per_level: float = 0.004
    perfect_min: float = 0.03
    perfect_max: float = 0.16
    good_min: float = 0.10
    good_max: float = 0.42


class ProgressionTuning(ContentModel):
    """Stat and skill point accounting."""

    start_stat_points: int = Field(default=0, ge=0)
    start_skill_points: int = Field(default=1, ge=0)
    stat_points_per_level: int = Field(default=1, ge=0)
    skill_points_per_level: int = Field(default=1, ge=0)


class Tuning(ContentModel):
    """Master balance configuration. Every group falls back to defaults."""

    tension: TensionTuning = Field(default_factory=TensionTuning)
    integrity: IntegrityTuning = Field(default_factory=IntegrityTuning)
    timing: TimingTuning = Field(default_factory=TimingTuning)
    progression: ProgressionTuning = Field(default_factory=ProgressionTuning)


class XpCurve(ContentModel):
    """Experience curve: xp to next = base * growth^(level-1)."""

    base: float = Field(default=40, ge=0)
    growth: float = Field(default=1.22, ge=1.0)


# =============================================================================
# World
# =============================================================================


class EncounterWeight(ContentModel):
    """One weighted row of an encounter pool."""

    enemy_id: str
    weight: float = Field(default=1.0, ge=0)


class RegionDef(ContentModel):
    """A fishing region gated by player level."""

    id: str
    name: str = ""
    required_level: int = Field(default=1, ge=1)
    encounter_pool: list[EncounterWeight] = Field(default_factory=list)


class EnemyDef(ContentModel):
    """
    A fish.

    Legacy exports describe fish as combat enemies with maxHp/attack; those
    are accepted as fallbacks for stamina/pressure.
    """

    id: str
    name: str = ""
    xp: int = Field(default=0, ge=0)
    stamina: int = Field(default=0, ge=0, description="Stamina pool to exhaust")
    pressure: float = Field(default=0, ge=0, description="Tension applied per fish turn")

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("stamina") is None:
            legacy = _first_present(data, "maxHp", "max_hp")
            if legacy is not None:
                data["stamina"] = legacy
        if data.get("pressure") is None:
            legacy = data.get("attack")
            if legacy is not None:
                data["pressure"] = legacy
        return data


# =============================================================================
# Actions and Items
# =============================================================================


class ActionKind(str, Enum):
    """Authored action kinds. ATTACK and UTILITY are legacy exports."""

    REEL = "reel"
    BRACE = "brace"
    ADJUST = "adjust"
    TECHNIQUE = "technique"
    ATTACK = "attack"
    UTILITY = "utility"


LEGACY_ACTION_KINDS = frozenset({ActionKind.ATTACK, ActionKind.UTILITY})


class ActionDef(ContentModel):
    """
    A player action.

    Canonical actions carry stamina/tension/integrity deltas
    (negative staminaDelta tires the fish, positive tensionDelta adds risk).
    Legacy actions carry damage/heal/focusCost/focusGain instead.
    """

    id: str
    label: str = ""
    kind: ActionKind = ActionKind.REEL
    timing: Literal["none", "basic"] = "basic"

    stamina_delta: int | None = None
    tension_delta: int | None = None
    integrity_delta: int | None = None

    # Legacy combat fields
    damage: int | None = None
    heal: int | None = None
    focus_cost: int | None = None
    focus_gain: int | None = None

    @property
    def has_deltas(self) -> bool:
        return any(
            value is not None
            for value in (self.stamina_delta, self.tension_delta, self.integrity_delta)
        )

    @property
    def is_legacy(self) -> bool:
        """Read through the combat-era fields: no deltas, and a legacy kind or field."""
        if self.has_deltas:
            return False
        if self.kind in LEGACY_ACTION_KINDS:
            return True
        return any(
            value is not None
            for value in (self.damage, self.heal, self.focus_cost, self.focus_gain)
        )


class ItemDef(ContentModel):
    """A consumable. Legacy `heal` is read as an integrity restore."""

    id: str
    label: str = ""
    integrity_restore: int = Field(default=0, ge=0)
    tension_reduce: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_heal(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        restore = _first_present(data, "integrityRestore", "integrity_restore")
        if restore is None and data.get("heal") is not None:
            data["integrityRestore"] = data["heal"]
        data.pop("heal", None)
        return data


# =============================================================================
# Skills and Rig Mods
# =============================================================================


class SkillType(str, Enum):
    PASSIVE = "PASSIVE"
    ACTIVE = "ACTIVE"
    REACTIVE = "REACTIVE"


class WearMultEffect(ContentModel):
    """Multiplies integrity wear (compounds per rank)."""

    kind: Literal["WEAR_MULT"] = "WEAR_MULT"
    mult: float = Field(default=1.0, ge=0)


class FishTensionMultEffect(ContentModel):
    """Multiplies the tension a fish applies (compounds per rank)."""

    kind: Literal["FISH_TENSION_MULT"] = "FISH_TENSION_MULT"
    mult: float = Field(default=1.0, ge=0)


class BraceBonusEffect(ContentModel):
    kind: Literal["BRACE_BONUS"] = "BRACE_BONUS"
    add: int = 0


class ReliefBonusEffect(ContentModel):
    kind: Literal["RELIEF_BONUS"] = "RELIEF_BONUS"
    add: int = 0


class ControlOnBraceEffect(ContentModel):
    kind: Literal["CONTROL_ON_BRACE"] = "CONTROL_ON_BRACE"
    add: int = 0


class ControlOnTensionEffect(ContentModel):
    """Grants combat control once per turn when tension crosses a threshold."""

    kind: Literal["CONTROL_ON_TENSION"] = "CONTROL_ON_TENSION"
    threshold: int = Field(default=70, ge=0)
    add: int = 0


class ExhaustedBleedEffect(ContentModel):
    """Drains fish stamina each fish turn while the fish is exhausted."""

    kind: Literal["EXHAUSTED_BLEED"] = "EXHAUSTED_BLEED"
    add: int = 0


class NegateWearOnPerfectEffect(ContentModel):
    kind: Literal["NEGATE_WEAR_ON_PERFECT"] = "NEGATE_WEAR_ON_PERFECT"


SkillEffect = Annotated[
    Union[
        WearMultEffect,
        FishTensionMultEffect,
        BraceBonusEffect,
        ReliefBonusEffect,
        ControlOnBraceEffect,
        ControlOnTensionEffect,
        ExhaustedBleedEffect,
        NegateWearOnPerfectEffect,
    ],
    Field(discriminator="kind"),
]


class SkillDef(ContentModel):
    """A rank-based skill."""

    id: str
    label: str = ""
    type: SkillType = SkillType.PASSIVE
    required_level: int = Field(default=1, ge=1)
    max_rank: int = Field(default=1, ge=1)
    requires: list[str] = Field(default_factory=list, description="Prerequisite skill ids")
    grants_actions: list[str] = Field(
        default_factory=list, description="Action ids unlocked (ACTIVE skills only)"
    )
    effects: list[SkillEffect] = Field(default_factory=list)


class StatBonusEffect(ContentModel):
    kind: Literal["STAT_BONUS"] = "STAT_BONUS"
    stat: StatName
    add: int = 0


class ModTensionMultEffect(ContentModel):
    kind: Literal["FISH_TENSION_MULT"] = "FISH_TENSION_MULT"
    mult: float = Field(default=1.0, ge=0)


class IntegrityWearMultEffect(ContentModel):
    kind: Literal["INTEGRITY_WEAR_MULT"] = "INTEGRITY_WEAR_MULT"
    mult: float = Field(default=1.0, ge=0)


RigModEffect = Annotated[
    Union[StatBonusEffect, ModTensionMultEffect, IntegrityWearMultEffect],
    Field(discriminator="kind"),
]


class RigModDef(ContentModel):
    """Equipment installed for the length of a contract."""

    id: str
    label: str = ""
    effects: list[RigModEffect] = Field(default_factory=list)


# =============================================================================
# Economy: Shops and Contracts
# =============================================================================


class ItemStock(ContentModel):
    kind: Literal["ITEM"] = "ITEM"
    id: str
    item_id: str
    price: int = Field(default=0, ge=0)
    amount: int = Field(default=1, ge=1)


class RigModStock(ContentModel):
    kind: Literal["RIG_MOD"] = "RIG_MOD"
    id: str
    mod_id: str
    price: int = Field(default=0, ge=0)


StockRow = Annotated[Union[ItemStock, RigModStock], Field(discriminator="kind")]


class ShopDef(ContentModel):
    id: str
    label: str = ""
    stock: list[StockRow] = Field(default_factory=list)


class Range(ContentModel):
    """Inclusive integer range."""

    min: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)


class RewardDef(ContentModel):
    currency: Range | None = None


class CampDef(ContentModel):
    shop_id: str | None = None


class ContractDef(ContentModel):
    """A multi-encounter run in one region."""

    id: str
    label: str = ""
    description: str = ""
    region_id: str
    encounter_count: Range = Field(default_factory=lambda: Range(min=2, max=5))
    encounter_pool: list[EncounterWeight] | None = Field(
        default=None, description="Overrides the region's pool when set"
    )
    camp: CampDef | None = None
    rewards: RewardDef | None = Field(default=None, description="Paid once on completion")
    rewards_per_fight: RewardDef | None = Field(default=None, description="Paid after each fight")


class Loadout(ContentModel):
    start_actions: list[str] = Field(default_factory=lambda: ["reel", "brace", "adjust"])
    start_items: dict[str, int] = Field(default_factory=dict)


class Economy(ContentModel):
    starting_currency: int = Field(default=0, ge=0)
    default_shop_id: str | None = None


# =============================================================================
# Bundle
# =============================================================================


class ContentBundle(ContentModel):
    """The full immutable content bundle passed to every engine call."""

    content_version: str = "0.1.0"
    xp_curve: XpCurve = Field(default_factory=XpCurve)
    regions: dict[str, RegionDef] = Field(default_factory=dict)
    enemies: dict[str, EnemyDef] = Field(default_factory=dict)
    actions: dict[str, ActionDef] = Field(default_factory=dict)
    items: dict[str, ItemDef] = Field(default_factory=dict)
    skills: dict[str, SkillDef] = Field(default_factory=dict)
    rig_mods: dict[str, RigModDef] = Field(default_factory=dict)
    shops: dict[str, ShopDef] = Field(default_factory=dict)
    contracts: dict[str, ContractDef] = Field(default_factory=dict)
    loadout: Loadout = Field(default_factory=Loadout)
    economy: Economy = Field(default_factory=Economy)
    tuning: Tuning = Field(default_factory=Tuning)

    @model_validator(mode="before")
    @classmethod
    def fill_record_ids(cls, data: Any) -> Any:
        """Records authored without an `id` take their dictionary key."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for section in (
            "regions",
            "enemies",
            "actions",
            "items",
            "skills",
            "rigMods",
            "rig_mods",
            "shops",
            "contracts",
        ):
            records = data.get(section)
            if not isinstance(records, dict):
                continue
            data[section] = {
                key: ({"id": key, **value} if isinstance(value, dict) and "id" not in value else value)
                for key, value in records.items()
            }
        return data

    def first_region_id(self) -> str | None:
        return next(iter(self.regions), None)


def load_content(data: dict[str, Any]) -> ContentBundle:
    """
    Load a content bundle from authored JSON data.

    Raises:
        pydantic.ValidationError: If the data does not describe a bundle.
    """
    return ContentBundle.model_validate(data)
