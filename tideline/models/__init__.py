"""
Core Data Models for Tideline.

These models define the two inputs of every engine call:
- ContentBundle: immutable, author-supplied definitions
- GameState: the run snapshot the engine owns and replaces wholesale

plus the single event each transition records.
"""

from tideline.models.content import (
    STAT_NAMES,
    ActionDef,
    ActionKind,
    ContentBundle,
    ContractDef,
    EnemyDef,
    ItemDef,
    RegionDef,
    RigModDef,
    ShopDef,
    SkillDef,
    SkillType,
    Tuning,
    load_content,
)
from tideline.models.event import (
    FishPhase,
    GameEvent,
    LogEvent,
    TimingGrade,
)
from tideline.models.state import (
    CombatOutcome,
    CombatState,
    ContractPhase,
    ContractRun,
    Encounter,
    GameState,
    PlayerState,
    PlayerStats,
    SkillFlags,
    Spawn,
    TurnOwner,
)

__all__ = [
    # Content
    "ContentBundle",
    "RegionDef",
    "EnemyDef",
    "ActionDef",
    "ActionKind",
    "ItemDef",
    "SkillDef",
    "SkillType",
    "RigModDef",
    "ShopDef",
    "ContractDef",
    "Tuning",
    "STAT_NAMES",
    "load_content",
    # Events
    "GameEvent",
    "LogEvent",
    "FishPhase",
    "TimingGrade",
    # Snapshot
    "GameState",
    "PlayerState",
    "PlayerStats",
    "CombatState",
    "CombatOutcome",
    "TurnOwner",
    "SkillFlags",
    "Spawn",
    "ContractRun",
    "ContractPhase",
    "Encounter",
]
