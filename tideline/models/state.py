"""
Game Snapshot Models for Tideline.

A GameState is the unit of persistence for one run. It is owned entirely by
the engine: callers store whatever snapshot an engine call returns and pass
it, untouched, into the next call. Snapshots are frozen; transitions build
new values with `model_copy(update=...)`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from tideline.models.event import FishPhase, GameEvent


class SnapshotModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


class TurnOwner(str, Enum):
    """Whose turn it is inside an encounter."""

    PLAYER = "PLAYER"
    FISH = "FISH"


class CombatOutcome(str, Enum):
    NONE = "NONE"
    DEFEAT_PROMPT = "DEFEAT_PROMPT"


class ContractPhase(str, Enum):
    FIGHT = "FIGHT"
    CAMP = "CAMP"
    SUMMARY = "SUMMARY"


# =============================================================================
# Player
# =============================================================================


class PlayerStats(SnapshotModel):
    """The five player stats (0..99 each)."""

    control: int = Field(default=0, ge=0, le=99)
    power: int = Field(default=0, ge=0, le=99)
    durability: int = Field(default=0, ge=0, le=99)
    precision: int = Field(default=0, ge=0, le=99)
    tactics: int = Field(default=0, ge=0, le=99)

    def get(self, stat: str) -> int:
        """Get a stat by name."""
        return getattr(self, stat)


class PlayerState(SnapshotModel):
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    xp_to_next: int = Field(default=40, ge=1)

    stats: PlayerStats = Field(default_factory=PlayerStats)
    stat_points: int = Field(default=0, ge=0)
    skills: dict[str, int] = Field(default_factory=dict, description="Skill id -> rank")
    skill_points: int = Field(default=0, ge=0)

    tension: int = Field(default=0, ge=0, description="0..max_tension")
    max_tension: int = Field(default=100, ge=1)
    line_integrity: int = Field(default=100, ge=0, description="0..max_line_integrity")
    max_line_integrity: int = Field(default=100, ge=1)

    known_actions: list[str] = Field(default_factory=list)
    inventory: dict[str, int] = Field(default_factory=dict)


class Progress(SnapshotModel):
    region_id: str = ""


# =============================================================================
# Contract
# =============================================================================


class Encounter(SnapshotModel):
    """One pre-rolled encounter of a contract."""

    region_id: str
    enemy_id: str


class ContractStats(SnapshotModel):
    perfect_count: int = Field(default=0, ge=0)
    fights_won: int = Field(default=0, ge=0)


class ContractReward(SnapshotModel):
    currency: int = Field(default=0, ge=0)


class ContractRun(SnapshotModel):
    """
    An active contract.

    Encounters and every currency reward are rolled when the contract starts
    and stored here, so a reloaded snapshot replays exactly.
    """

    contract_id: str
    region_id: str
    encounters: list[Encounter]
    index: int = Field(default=0, ge=0)
    phase: ContractPhase = ContractPhase.FIGHT
    stats: ContractStats = Field(default_factory=ContractStats)
    earned: ContractReward = Field(default_factory=ContractReward)
    last_reward: ContractReward | None = None
    fight_rewards: list[int] = Field(default_factory=list, description="Pre-rolled, per encounter")
    final_reward: int = Field(default=0, ge=0, description="Pre-rolled completion reward")

    @property
    def current_encounter(self) -> Encounter:
        return self.encounters[self.index]

    @property
    def is_last_encounter(self) -> bool:
        return self.index >= len(self.encounters) - 1

    @property
    def current_fight_won(self) -> bool:
        return self.stats.fights_won > self.index


# =============================================================================
# Combat
# =============================================================================


class SkillFlags(SnapshotModel):
    """One-turn flags set by skill effects."""

    negate_next_wear: bool = False
    threshold_turn: int | None = Field(
        default=None, description="Turn on which the tension-threshold grant last fired"
    )


class Spawn(SnapshotModel):
    region_id: str
    enemy_id: str


class CombatState(SnapshotModel):
    """An active encounter."""

    enemy_id: str
    fish_stamina: int = Field(ge=0)
    max_fish_stamina: int = Field(ge=0)
    fish_phase: FishPhase = FishPhase.AGGRESSIVE

    phase: TurnOwner = TurnOwner.PLAYER
    turn: int = Field(default=1, ge=1)

    brace: int = Field(default=0, ge=0, description="Blunts the fish's next pressure")
    control: int = Field(default=0, ge=0, description="Dampens tension gain this encounter")
    flags: SkillFlags = Field(default_factory=SkillFlags)

    last_spawn: Spawn | None = None
    outcome: CombatOutcome = CombatOutcome.NONE


# =============================================================================
# Snapshot
# =============================================================================


class GameState(SnapshotModel):
    """A complete run snapshot."""

    progress: Progress = Field(default_factory=Progress)
    player: PlayerState = Field(default_factory=PlayerState)
    currency: int = Field(default=0, ge=0)
    temporary_mods: list[str] = Field(default_factory=list, description="Installed rig mod ids")
    contract: ContractRun | None = None
    combat: CombatState | None = None
    last_event: GameEvent | None = None

    @property
    def in_combat(self) -> bool:
        return self.combat is not None

    @property
    def awaiting_defeat_choice(self) -> bool:
        return self.combat is not None and self.combat.outcome == CombatOutcome.DEFEAT_PROMPT
