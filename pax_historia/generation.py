"""Generation client: the three request kinds on top of an injected LLM.

    generate_events(params)    -> ParsedEvents | DegradedEvents
    advise(params)             -> GenerationResult (text passthrough)
    diplomatic_reply(request)  -> GenerationResult (empty text on failure)

None of these raise on backend or parse failure. Transport errors
(``LLMError``) and unusable output are turned into typed degraded results so
callers can tell "no events" apart from "something went wrong" without a
try/except of their own.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pax_historia.llm import LLM, LLMError
from pax_historia.models import ChatMessage, GeneratedEvent, finite_number
from pax_historia.prompts import (
    AdvisorParams,
    DiplomacyParams,
    PromptError,
    PromptKind,
    TurnEventsParams,
    render_messages,
)

logger = logging.getLogger(__name__)

TURN_TEMPERATURE = 0.7
TURN_MAX_TOKENS = 3000
ADVISOR_TEMPERATURE = 0.7
DIPLOMACY_TEMPERATURE = 0.8
DIPLOMACY_MAX_TOKENS = 1000

DEBUG_FILENAME = "last_ai_response.txt"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ParsedEvents:
    events: list[GeneratedEvent]
    global_tension_delta: float = 0.0
    dropped: int = 0  # entries that failed validation


@dataclass
class DegradedEvents:
    error: str
    events: list[GeneratedEvent] = field(default_factory=list)
    global_tension_delta: float = 0.0


@dataclass
class GenerationResult:
    text: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DiplomacyRequest:
    """Everything needed to produce one partner's reply in a chat."""

    participants: list[str]
    player_polity: str
    responding_polity: str
    current_date: str
    transcript: list[ChatMessage]  # includes the incoming message
    incoming_message: str
    world_state: dict[str, dict[str, Any]] = field(default_factory=dict)
    event_history: list[dict[str, Any]] = field(default_factory=list)
    world_context: str = ""
    simulation_rules: str = ""


# ---------------------------------------------------------------------------
# Parse pipeline for turn generation output
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)(?:```|$)", re.DOTALL | re.IGNORECASE)
_PLUS_RE = re.compile(r"([:\[,]\s*)\+(\d+(?:\.\d*)?)")
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Return the body of the first ```json / ``` block, or the text unchanged."""
    if "```" not in text:
        return text.strip()
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def normalize_plus_signs(text: str) -> str:
    """Drop the '+' in front of positive numbers (``"stability": +5`` is not JSON)."""
    return _PLUS_RE.sub(r"\1\2", text)


def parse_json_object(text: str) -> dict | None:
    """Strict parse first, then the greedy first-'{'-to-last-'}' fallback."""
    cleaned = normalize_plus_signs(strip_code_fences(text))
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _OBJECT_RE.search(cleaned)
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def _as_float(value: Any) -> float:
    number = finite_number(value)
    return 0.0 if number is None else number


def parse_turn_events(raw: str) -> ParsedEvents | DegradedEvents:
    """Turn raw model output into validated events. Never raises."""
    data = parse_json_object(raw)
    if data is None:
        logger.warning("Turn generation output is not valid JSON")
        return DegradedEvents(error="unparsable generation output")

    entries = data.get("events")
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        logger.warning("Turn generation output has a non-list 'events' field")
        return DegradedEvents(error="'events' is not a list")

    events: list[GeneratedEvent] = []
    dropped = 0
    for entry in entries:
        if not isinstance(entry, dict):
            dropped += 1
            continue
        try:
            events.append(GeneratedEvent.model_validate(entry))
        except ValidationError as e:
            dropped += 1
            logger.debug("dropping generated event: %s", e)
    if dropped:
        logger.info(f"Dropped {dropped} malformed generated event(s)")

    return ParsedEvents(
        events=events,
        global_tension_delta=_as_float(data.get("global_tension_delta")),
        dropped=dropped,
    )


def target_reply_length(transcript: list[ChatMessage], incoming_message: str) -> int:
    """Mean length of the player's messages in the chat, else the incoming message length."""
    lengths = [len(m.message_text) for m in transcript if m.sender_is_player]
    if not lengths:
        return len(incoming_message)
    return round(sum(lengths) / len(lengths))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class GenerationClient:
    """Renders prompts, calls the LLM and coerces the response.

    Args:
        llm:        Any callable matching the ``LLM`` protocol.
        debug_dir:  Where the raw turn response is dumped for inspection.
                    ``None`` disables the debug sink.
    """

    def __init__(self, llm: LLM, debug_dir: Path | None = None) -> None:
        self.llm = llm
        self.debug_dir = debug_dir

    def _write_debug(self, raw: str) -> None:
        if self.debug_dir is None:
            return
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            (self.debug_dir / DEBUG_FILENAME).write_text(raw)
        except OSError as e:
            logger.warning(f"Failed to write debug response: {e}")

    async def generate_events(self, params: TurnEventsParams) -> ParsedEvents | DegradedEvents:
        try:
            messages = render_messages(PromptKind.TURN_EVENTS, params)
            raw = await self.llm(
                PromptKind.TURN_EVENTS.value,
                messages,
                temperature=TURN_TEMPERATURE,
                max_tokens=TURN_MAX_TOKENS,
            )
        except (LLMError, PromptError) as e:
            logger.error(f"Event generation failed: {e}")
            return DegradedEvents(error=str(e))

        self._write_debug(raw)
        return parse_turn_events(raw)

    async def advise(self, params: AdvisorParams) -> GenerationResult:
        try:
            messages = render_messages(PromptKind.ADVISOR, params)
            text = await self.llm(
                PromptKind.ADVISOR.value, messages, temperature=ADVISOR_TEMPERATURE
            )
        except (LLMError, PromptError) as e:
            logger.error(f"Advisor generation failed: {e}")
            return GenerationResult(text=f"Advisor unavailable: {e}", error=str(e))
        return GenerationResult(text=text)

    async def diplomatic_reply(self, request: DiplomacyRequest) -> GenerationResult:
        params = DiplomacyParams(
            participants=request.participants,
            player_polity=request.player_polity,
            responding_polity=request.responding_polity,
            current_date=request.current_date,
            transcript=request.transcript,
            target_length=target_reply_length(request.transcript, request.incoming_message),
            world_state=request.world_state,
            event_history=request.event_history,
            world_context=request.world_context,
            simulation_rules=request.simulation_rules,
        )
        try:
            messages = render_messages(PromptKind.DIPLOMACY, params)
            text = await self.llm(
                PromptKind.DIPLOMACY.value,
                messages,
                temperature=DIPLOMACY_TEMPERATURE,
                max_tokens=DIPLOMACY_MAX_TOKENS,
            )
        except (LLMError, PromptError) as e:
            logger.error(f"Diplomatic reply from {request.responding_polity} failed: {e}")
            return GenerationResult(text="", error=str(e))
        return GenerationResult(text=text.strip())
