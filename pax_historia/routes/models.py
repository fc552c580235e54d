"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel, Field

from pax_historia.models import UnitType


class NewGameBody(BaseModel):
    nation_code: str
    start_date: str | None = None


class RenameSaveBody(BaseModel):
    name: str


class AdvanceBody(BaseModel):
    time_jump: str = "1_week"


class ActionBody(BaseModel):
    action_text: str
    action_type: str = "general"


class StartChatBody(BaseModel):
    participant_nations: list[str] = Field(min_length=1)
    topic: str | None = None


class ChatMessageBody(BaseModel):
    message: str
    sender_nation: str | None = None  # defaults to the player nation
    is_player: bool = True


class AskBody(BaseModel):
    question: str


class StrategicBody(BaseModel):
    focus: str | None = None


class CreateUnitBody(BaseModel):
    name: str
    unit_type: UnitType
    nation_code: str
    region_id: str
    strength: int = 100
    organization: int = 100
    experience: int = 0
    centroid: list[float] | None = None


class MoveUnitBody(BaseModel):
    to_region_id: str


class UpdateSettingsBody(BaseModel):
    start_date: str | None = None
    world_context: str | None = None
    simulation_rules: str | None = None
