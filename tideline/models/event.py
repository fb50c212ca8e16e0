"""
Event Models for Tideline.

Every engine transition stores exactly one event in `GameState.last_event`
describing what happened. Events are for the UI and logs only; the engine
never reads them back.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class FishPhase(str, Enum):
    """Fish behavior phase, derived from remaining stamina ratio."""

    AGGRESSIVE = "AGGRESSIVE"
    DEFENSIVE = "DEFENSIVE"
    EXHAUSTED = "EXHAUSTED"


class TimingGrade(str, Enum):
    """Classification of a timed input."""

    MISS = "MISS"
    GOOD = "GOOD"
    PERFECT = "PERFECT"


class EventModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


class LogEvent(EventModel):
    type: Literal["LOG"] = "LOG"
    text: str


class TimingEvent(EventModel):
    """
    A timing result on its own.

    Parse-only: kept so stored snapshots and UI-built logs that carry one
    still load. The engine never emits it; a timed action reports the
    stamina, tension or phase change it caused instead.
    """

    type: Literal["TIMING"] = "TIMING"
    grade: TimingGrade


class TensionEvent(EventModel):
    type: Literal["TENSION"] = "TENSION"
    delta: int
    tension: int
    reason: str | None = None


class IntegrityEvent(EventModel):
    type: Literal["INTEGRITY"] = "INTEGRITY"
    delta: int
    integrity: int
    reason: str | None = None


class StaminaEvent(EventModel):
    type: Literal["STAMINA"] = "STAMINA"
    delta: int
    phase: FishPhase
    reason: str | None = None


class PhaseEvent(EventModel):
    type: Literal["PHASE"] = "PHASE"
    phase: FishPhase


class XpEvent(EventModel):
    type: Literal["XP"] = "XP"
    amount: int


class LevelUpEvent(EventModel):
    type: Literal["LEVEL_UP"] = "LEVEL_UP"
    level: int


class SpawnEvent(EventModel):
    type: Literal["SPAWN"] = "SPAWN"
    region_id: str
    enemy_id: str


class DefeatPromptEvent(EventModel):
    type: Literal["DEFEAT_PROMPT"] = "DEFEAT_PROMPT"


class FleeEvent(EventModel):
    type: Literal["FLEE"] = "FLEE"


class ContractEvent(EventModel):
    """Contract phase transition (start, camp, next fight, summary, end)."""

    type: Literal["CONTRACT"] = "CONTRACT"
    contract_id: str
    phase: str
    index: int = 0


class PurchaseEvent(EventModel):
    type: Literal["PURCHASE"] = "PURCHASE"
    shop_id: str
    stock_id: str
    price: int


class SkillEvent(EventModel):
    type: Literal["SKILL"] = "SKILL"
    skill_id: str
    rank: int


class StatEvent(EventModel):
    type: Literal["STAT"] = "STAT"
    stat: str
    value: int


class RespecEvent(EventModel):
    type: Literal["RESPEC"] = "RESPEC"


GameEvent = Annotated[
    Union[
        LogEvent,
        TimingEvent,
        TensionEvent,
        IntegrityEvent,
        StaminaEvent,
        PhaseEvent,
        XpEvent,
        LevelUpEvent,
        SpawnEvent,
        DefeatPromptEvent,
        FleeEvent,
        ContractEvent,
        PurchaseEvent,
        SkillEvent,
        StatEvent,
        RespecEvent,
    ],
    Field(discriminator="type"),
]

GAME_EVENT_ADAPTER: TypeAdapter[GameEvent] = TypeAdapter(GameEvent)
