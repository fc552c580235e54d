"""Tests for the generation client: the turn-output parse pipeline, degraded
results on backend failure, the debug sink, and diplomacy length targeting."""

import json
from pathlib import Path

import pytest

from stub_llm import StubLLM

from pax_historia.generation import (
    DEBUG_FILENAME,
    DegradedEvents,
    DiplomacyRequest,
    GenerationClient,
    ParsedEvents,
    normalize_plus_signs,
    parse_json_object,
    parse_turn_events,
    strip_code_fences,
    target_reply_length,
)
from pax_historia.llm import LLMError
from pax_historia.models import ChatMessage
from pax_historia.prompts import AdvisorParams, TurnEventsParams

EVENT = {
    "title": "Italian advance on Makalle",
    "description": "Badoglio's columns push south.",
    "event_type": "military",
    "severity": "major",
    "affected_nations": ["ITA", "ETH"],
    "state_changes": {"ETH": {"stability": -10}},
}


# ---------------------------------------------------------------------------
# Parse pipeline
# ---------------------------------------------------------------------------

class TestStripCodeFences:
    def test_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert strip_code_fences('Here you go:\n```\n{"a": 1}\n```\nEnjoy') == '{"a": 1}'

    def test_unterminated_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestNormalizePlusSigns:
    def test_after_colon(self) -> None:
        assert normalize_plus_signs('{"stability": +5}') == '{"stability": 5}'

    def test_decimal(self) -> None:
        assert normalize_plus_signs('{"x":+2.5}') == '{"x":2.5}'

    def test_inside_arrays(self) -> None:
        assert normalize_plus_signs("[+1, +2]") == "[1, 2]"

    def test_negative_untouched(self) -> None:
        assert normalize_plus_signs('{"x": -5}') == '{"x": -5}'


class TestParseJsonObject:
    def test_strict(self) -> None:
        assert parse_json_object('{"events": []}') == {"events": []}

    def test_greedy_fallback_with_prose(self) -> None:
        raw = 'Sure! Here are the events: {"events": [], "global_tension_delta": 2} Hope it helps.'
        assert parse_json_object(raw) == {"events": [], "global_tension_delta": 2}

    def test_garbage(self) -> None:
        assert parse_json_object("The world is quiet this week.") is None

    def test_broken_braces(self) -> None:
        assert parse_json_object("{ this is { not json }") is None

    def test_top_level_array_rejected(self) -> None:
        assert parse_json_object("[1, 2]") is None


class TestParseTurnEvents:
    def test_clean_output(self) -> None:
        result = parse_turn_events(json.dumps({"events": [EVENT], "global_tension_delta": 3}))
        assert isinstance(result, ParsedEvents)
        assert [e.title for e in result.events] == ["Italian advance on Makalle"]
        assert result.global_tension_delta == 3

    def test_fenced_output_with_plus_sign(self) -> None:
        raw = (
            "```json\n"
            '{"events": [{"title": "Rally in Rome", "severity": "minor",\n'
            '  "state_changes": {"ITA": {"stability": +5, "war_support": +2}}}],\n'
            ' "global_tension_delta": +1}\n'
            "```"
        )
        result = parse_turn_events(raw)
        assert isinstance(result, ParsedEvents)
        change = result.events[0].state_changes["ITA"]
        assert change.stability == 5
        assert change.war_support == 2
        assert result.global_tension_delta == 1

    def test_garbage_degrades_to_empty(self) -> None:
        result = parse_turn_events("I'm sorry, I cannot help with that.")
        assert isinstance(result, DegradedEvents)
        assert result.events == []
        assert result.error

    def test_empty_string_degrades(self) -> None:
        assert isinstance(parse_turn_events(""), DegradedEvents)

    def test_events_not_a_list_degrades(self) -> None:
        assert isinstance(parse_turn_events('{"events": "none"}'), DegradedEvents)

    def test_missing_events_key_is_empty_success(self) -> None:
        result = parse_turn_events('{"consequences": "calm"}')
        assert isinstance(result, ParsedEvents)
        assert result.events == []

    def test_invalid_entries_dropped_others_kept(self) -> None:
        raw = json.dumps({"events": [EVENT, {"description": "untitled"}, "text", EVENT]})
        result = parse_turn_events(raw)
        assert isinstance(result, ParsedEvents)
        assert len(result.events) == 2
        assert result.dropped == 2

    def test_order_preserved(self) -> None:
        raw = json.dumps({"events": [{"title": t} for t in ("a", "b", "c")]})
        assert [e.title for e in parse_turn_events(raw).events] == ["a", "b", "c"]

    def test_non_numeric_tension(self) -> None:
        result = parse_turn_events('{"events": [], "global_tension_delta": "high"}')
        assert result.global_tension_delta == 0.0

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", "1e999", "\"inf\""])
    def test_non_finite_tension_is_zero(self, value: str) -> None:
        result = parse_turn_events('{"events": [], "global_tension_delta": ' + value + "}")
        assert isinstance(result, ParsedEvents)
        assert result.global_tension_delta == 0.0

    def test_signed_string_tension(self) -> None:
        result = parse_turn_events('{"events": [], "global_tension_delta": "+2.5"}')
        assert result.global_tension_delta == 2.5


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def _turn_params() -> TurnEventsParams:
    return TurnEventsParams(
        time_jump="1_week",
        current_date="1936-01-01",
        nation_code="ITA",
        nation_name="Italy",
        actions=[],
        recent_events=[],
        world_state={},
    )


def _advisor_params() -> AdvisorParams:
    return AdvisorParams(
        question="What now?",
        nation_code="ITA",
        nation_name="Italy",
        current_date="1936-01-01",
        world_state={},
    )


class TestGenerateEvents:
    async def test_sampling_parameters(self) -> None:
        llm = StubLLM({"turn_events": ['{"events": []}']})
        await GenerationClient(llm).generate_events(_turn_params())
        call = llm.calls[0]
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 3000

    async def test_backend_failure_degrades(self) -> None:
        llm = StubLLM({"turn_events": [LLMError("Cannot connect")]})
        result = await GenerationClient(llm).generate_events(_turn_params())
        assert isinstance(result, DegradedEvents)
        assert result.error == "Cannot connect"
        assert result.events == []

    async def test_debug_sink_written(self, tmp_path: Path) -> None:
        llm = StubLLM({"turn_events": ["not json at all"]})
        await GenerationClient(llm, debug_dir=tmp_path / "debug").generate_events(_turn_params())
        assert (tmp_path / "debug" / DEBUG_FILENAME).read_text() == "not json at all"

    async def test_debug_sink_failure_is_swallowed(self, tmp_path: Path) -> None:
        blocker = tmp_path / "debug"
        blocker.write_text("a file where the directory should be")
        llm = StubLLM({"turn_events": ['{"events": [{"title": "ok"}]}']})
        result = await GenerationClient(llm, debug_dir=blocker).generate_events(_turn_params())
        assert isinstance(result, ParsedEvents)
        assert result.events[0].title == "ok"


class TestAdvise:
    async def test_passthrough(self) -> None:
        llm = StubLLM({"advisor": ["  ### ANALYSIS\nHold Massawa.  "]})
        result = await GenerationClient(llm).advise(_advisor_params())
        assert result.ok
        assert result.text == "  ### ANALYSIS\nHold Massawa.  "
        assert llm.calls[0]["temperature"] == 0.7
        assert llm.calls[0]["max_tokens"] is None

    async def test_failure_returns_error_text(self) -> None:
        llm = StubLLM({"advisor": [LLMError("LLM backend returned HTTP 503")]})
        result = await GenerationClient(llm).advise(_advisor_params())
        assert not result.ok
        assert result.text.startswith("Advisor unavailable:")
        assert "503" in result.error


# ---------------------------------------------------------------------------
# Diplomacy
# ---------------------------------------------------------------------------

def _msg(text: str, player: bool) -> ChatMessage:
    return ChatMessage(
        sender_nation="ITA" if player else "GER",
        sender_is_player=player,
        message_text=text,
        game_date="1936-01-01",
    )


def test_target_length_is_player_mean():
    transcript = [_msg("a" * 30, True), _msg("b" * 500, False), _msg("c" * 50, True), _msg("d" * 40, True)]
    assert target_reply_length(transcript, "ignored") == 40


def test_target_length_falls_back_to_incoming():
    assert target_reply_length([_msg("x" * 99, False)], "hello there") == 11


async def test_diplomatic_reply_injects_length_target():
    llm = StubLLM({"diplomacy": ["  Berlin accepts.  "]})
    transcript = [_msg("a" * 30, True), _msg("b" * 200, False), _msg("c" * 50, True), _msg("d" * 40, True)]
    request = DiplomacyRequest(
        participants=["Italy", "Germany"],
        player_polity="Italy",
        responding_polity="Germany",
        current_date="1936-03-01",
        transcript=transcript,
        incoming_message="d" * 40,
    )
    result = await GenerationClient(llm).diplomatic_reply(request)

    assert result.ok
    assert result.text == "Berlin accepts."
    call = llm.calls[0]
    assert call["temperature"] == 0.8
    assert call["max_tokens"] == 1000
    system = call["messages"][0]["content"]
    assert "(40 characters)" in system
    assert "between 36 and 44 characters" in system
    assert len(call["messages"]) == 1 + len(transcript)


async def test_diplomatic_reply_failure_is_empty():
    llm = StubLLM({"diplomacy": [LLMError("boom")]})
    request = DiplomacyRequest(
        participants=["Italy", "Germany"],
        player_polity="Italy",
        responding_polity="Germany",
        current_date="1936-03-01",
        transcript=[_msg("hi", True)],
        incoming_message="hi",
    )
    result = await GenerationClient(llm).diplomatic_reply(request)
    assert result.text == ""
    assert result.error == "boom"
