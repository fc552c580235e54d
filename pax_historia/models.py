"""Core domain models.

Every save is one JSON document (``Save``) that owns all of its nations,
units, actions, events and diplomatic chats. Pydantic is used for validation
and serialisation at every data boundary: on disk, on the HTTP surface, and
when re-validating the untrusted JSON returned by the generation backend
(``GeneratedEvent`` / ``StateChange``).
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from pax_historia.errors import ChatNotFound, UnitNotFound

SAVE_FORMAT_VERSION = 1

EventType = Literal["political", "military", "economic", "diplomatic", "social"]
Severity = Literal["minor", "moderate", "major", "critical"]
ActionStatus = Literal["pending", "completed"]
UnitType = Literal["infantry", "armor", "naval"]
ChatType = Literal["bilateral", "conference"]

EVENT_TYPES: tuple[str, ...] = ("political", "military", "economic", "diplomatic", "social")
SEVERITIES: tuple[str, ...] = ("minor", "moderate", "major", "critical")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def finite_number(value: Any) -> float | None:
    """Coerce a generated number (or numeric string like "+5") to a finite float, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().lstrip("+")
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def new_id() -> str:
    return uuid.uuid4().hex[:16]


# ---------------------------------------------------------------------------
# Static registry entry
# ---------------------------------------------------------------------------

class Nation(BaseModel):
    """A polity from the read-only nation registry (display metadata only)."""

    code: str
    name: str
    color: str = "#808080"
    leader_name: str = ""
    leader_title: str = "Leader"
    ideology: str = ""
    is_major_power: bool = False
    manpower: int = 100_000


# ---------------------------------------------------------------------------
# Per-save world state
# ---------------------------------------------------------------------------

class NationState(BaseModel):
    """Mutable simulation state of one nation inside a save."""

    code: str
    stability: int = 70  # 0–100, clamped on every delta
    war_support: int = 20  # 0–100, clamped on every delta
    manpower: int = 100_000
    political_power: int = 100
    treasury: int = 1000  # no floor
    at_war: bool = False
    relations: dict[str, int] = Field(default_factory=dict)
    occupied_regions: list[str] = Field(default_factory=list)  # set semantics


class StateChange(BaseModel):
    """Deltas an event applies to one nation. Missing or non-numeric fields are ignored."""

    stability: float | None = None
    war_support: float | None = None
    treasury: float | None = None
    occupied_regions: list[str] | None = None

    @field_validator("stability", "war_support", "treasury", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> float | None:
        return finite_number(value)

    @field_validator("occupied_regions", mode="before")
    @classmethod
    def _region_list(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return None
        return [str(r).strip() for r in value if isinstance(r, (str, int)) and str(r).strip()]


class GeneratedEvent(BaseModel):
    """One event as described by the generation backend.

    The backend's JSON is untrusted: the type and severity fall back to
    ``political`` / ``minor`` when unrecognised, nation codes are upper-cased,
    and malformed ``state_changes`` entries are dropped. A missing or empty
    title is the only hard failure.
    """

    title: str
    description: str = ""
    event_type: EventType = "political"
    severity: Severity = "minor"
    affected_nations: list[str] = Field(default_factory=list)
    state_changes: dict[str, StateChange] | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_type_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and "event_type" not in data and "type" in data:
            data = dict(data)
            data["event_type"] = data.pop("type")
        return data

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("event title is empty")
        return value

    @field_validator("event_type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> str:
        value = str(value or "").strip().lower()
        return value if value in EVENT_TYPES else "political"

    @field_validator("severity", mode="before")
    @classmethod
    def _normalise_severity(cls, value: Any) -> str:
        value = str(value or "").strip().lower()
        return value if value in SEVERITIES else "minor"

    @field_validator("affected_nations", mode="before")
    @classmethod
    def _upper_codes(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [str(code).strip().upper() for code in value if str(code).strip()]

    @field_validator("state_changes", mode="before")
    @classmethod
    def _keep_valid_changes(cls, value: Any) -> dict[str, Any] | None:
        if not isinstance(value, dict):
            return None
        return {
            str(code).strip().upper(): changes
            for code, changes in value.items()
            if isinstance(changes, dict)
        }


class Event(GeneratedEvent):
    """A generated event stamped with its identity and turn. Append-only."""

    id: str = Field(default_factory=new_id)
    game_date: str
    turn_number: int
    created_at: str = Field(default_factory=utc_now)


class Action(BaseModel):
    """A free-text order submitted by the player, consumed by the next turn."""

    id: str = Field(default_factory=new_id)
    nation_code: str
    action_text: str
    action_type: str = "general"
    status: ActionStatus = "pending"
    turn_number: int
    created_at: str = Field(default_factory=utc_now)


class Unit(BaseModel):
    """A military unit shown on the map. Moves only; no combat model."""

    id: str = Field(default_factory=new_id)
    name: str
    unit_type: UnitType
    nation_code: str
    region_id: str
    centroid: list[float] | None = None  # map coordinates for display
    strength: int = 100
    organization: int = 100
    experience: int = 0
    created_at: str = Field(default_factory=utc_now)
    updated_at: str | None = None


class ChatMessage(BaseModel):
    """A single line in a diplomatic chat. Immutable once appended."""

    id: str = Field(default_factory=new_id)
    sender_nation: str
    sender_is_player: bool
    message_text: str
    game_date: str
    created_at: str = Field(default_factory=utc_now)


class DiplomaticChat(BaseModel):
    """A bilateral or multi-party conversation thread."""

    id: str = Field(default_factory=new_id)
    participant_nations: list[str]
    chat_type: ChatType = "bilateral"
    topic: str = "Diplomacy"
    is_active: bool = True
    created_at: str = Field(default_factory=utc_now)
    messages: list[ChatMessage] = Field(default_factory=list)


class Save(BaseModel):
    """Root aggregate: one complete, independent playthrough."""

    version: int = SAVE_FORMAT_VERSION
    id: str
    name: str
    player_nation_code: str
    current_date: str  # ISO YYYY-MM-DD
    turn_number: int = 1
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
    world_context: str = ""
    simulation_rules: str = ""
    nations: dict[str, NationState] = Field(default_factory=dict)
    units: list[Unit] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    chats: list[DiplomaticChat] = Field(default_factory=list)

    def pending_actions(self) -> list[Action]:
        return [a for a in self.actions if a.status == "pending"]

    def recent_events(self, count: int) -> list[Event]:
        return self.events[-count:] if count > 0 else []

    def find_chat(self, chat_id: str) -> DiplomaticChat:
        for chat in self.chats:
            if chat.id == chat_id:
                return chat
        raise ChatNotFound(chat_id)

    def find_unit(self, unit_id: str) -> Unit:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        raise UnitNotFound(unit_id)


class SaveSummary(BaseModel):
    """Row in the save list."""

    id: str
    name: str
    nation_code: str
    nation_name: str
    current_date: str
    turn_number: int
    updated_at: str


class TurnResult(BaseModel):
    """Outcome of one turn advancement."""

    previous_date: str
    new_date: str
    turn_number: int
    events: list[Event]
    processed_actions: int
    global_tension_delta: float = 0.0
    generation_error: str | None = None
