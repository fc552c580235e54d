"""Tests for pax_historia.models: coercion of untrusted generated output and Save helpers."""

import pytest
from pydantic import ValidationError

from pax_historia.errors import ChatNotFound, UnitNotFound
from pax_historia.models import (
    Action,
    Event,
    GeneratedEvent,
    NationState,
    Save,
    StateChange,
)


# ---------------------------------------------------------------------------
# StateChange
# ---------------------------------------------------------------------------

class TestStateChange:
    def test_numbers_pass_through(self) -> None:
        change = StateChange.model_validate({"stability": -5, "treasury": 250.5})
        assert change.stability == -5
        assert change.treasury == 250.5
        assert change.war_support is None

    def test_numeric_strings_are_accepted(self) -> None:
        change = StateChange.model_validate({"stability": "+5", "war_support": " -3 "})
        assert change.stability == 5
        assert change.war_support == -3

    def test_non_numeric_values_are_dropped(self) -> None:
        change = StateChange.model_validate(
            {"stability": "a lot", "war_support": True, "treasury": [1]}
        )
        assert change.stability is None
        assert change.war_support is None
        assert change.treasury is None

    def test_non_finite_values_are_dropped(self) -> None:
        change = StateChange.model_validate(
            {"stability": float("nan"), "war_support": "-inf", "treasury": 10**400}
        )
        assert change.stability is None
        assert change.war_support is None
        assert change.treasury is None

    def test_single_region_string_becomes_list(self) -> None:
        change = StateChange.model_validate({"occupied_regions": "Addis Abeba"})
        assert change.occupied_regions == ["Addis Abeba"]

    def test_blank_regions_are_removed(self) -> None:
        change = StateChange.model_validate({"occupied_regions": ["Tigray", "  ", None]})
        assert change.occupied_regions == ["Tigray"]


# ---------------------------------------------------------------------------
# GeneratedEvent
# ---------------------------------------------------------------------------

class TestGeneratedEvent:
    def test_minimal_event(self) -> None:
        event = GeneratedEvent.model_validate({"title": "Crisis in Abyssinia"})
        assert event.event_type == "political"
        assert event.severity == "minor"
        assert event.affected_nations == []
        assert event.state_changes is None

    def test_missing_title_fails(self) -> None:
        with pytest.raises(ValidationError):
            GeneratedEvent.model_validate({"description": "no title"})

    def test_blank_title_fails(self) -> None:
        with pytest.raises(ValidationError):
            GeneratedEvent.model_validate({"title": "   "})

    def test_unknown_type_and_severity_fall_back(self) -> None:
        event = GeneratedEvent.model_validate(
            {"title": "x", "event_type": "cultural", "severity": "apocalyptic"}
        )
        assert event.event_type == "political"
        assert event.severity == "minor"

    def test_type_and_severity_are_case_insensitive(self) -> None:
        event = GeneratedEvent.model_validate(
            {"title": "x", "event_type": "Military", "severity": "CRITICAL"}
        )
        assert event.event_type == "military"
        assert event.severity == "critical"

    def test_type_alias(self) -> None:
        event = GeneratedEvent.model_validate({"title": "x", "type": "economic"})
        assert event.event_type == "economic"

    def test_codes_are_upper_cased(self) -> None:
        event = GeneratedEvent.model_validate({
            "title": "x",
            "affected_nations": ["ita", "eth"],
            "state_changes": {"ita": {"stability": 2}},
        })
        assert event.affected_nations == ["ITA", "ETH"]
        assert list(event.state_changes) == ["ITA"]

    def test_malformed_state_change_entries_are_dropped(self) -> None:
        event = GeneratedEvent.model_validate({
            "title": "x",
            "state_changes": {"ITA": {"stability": 1}, "GER": "up", "FRA": 3},
        })
        assert list(event.state_changes) == ["ITA"]

    def test_non_dict_state_changes_ignored(self) -> None:
        event = GeneratedEvent.model_validate({"title": "x", "state_changes": ["ITA"]})
        assert event.state_changes is None


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

def _save() -> Save:
    return Save(
        id="s1",
        name="Test",
        player_nation_code="ITA",
        current_date="1936-01-01",
        nations={"ITA": NationState(code="ITA")},
    )


def test_nation_state_defaults() -> None:
    state = NationState(code="ITA")
    assert state.stability == 70
    assert state.war_support == 20
    assert state.political_power == 100
    assert state.treasury == 1000
    assert state.occupied_regions == []


def test_pending_actions_filters_completed() -> None:
    save = _save()
    save.actions = [
        Action(nation_code="ITA", action_text="a", turn_number=1),
        Action(nation_code="ITA", action_text="b", turn_number=1, status="completed"),
    ]
    assert [a.action_text for a in save.pending_actions()] == ["a"]


def test_recent_events_window() -> None:
    save = _save()
    save.events = [
        Event(title=f"e{i}", game_date="1936-01-01", turn_number=1) for i in range(15)
    ]
    assert [e.title for e in save.recent_events(3)] == ["e12", "e13", "e14"]
    assert save.recent_events(0) == []


def test_find_chat_and_unit_raise_not_found() -> None:
    save = _save()
    with pytest.raises(ChatNotFound):
        save.find_chat("nope")
    with pytest.raises(UnitNotFound):
        save.find_unit("nope")


def test_save_json_round_trip_keeps_events() -> None:
    save = _save()
    save.events.append(Event(
        title="Walwal incident",
        game_date="1936-01-01",
        turn_number=1,
        state_changes={"ITA": {"war_support": 5}},
    ))
    restored = Save.model_validate_json(save.model_dump_json())
    assert restored.events[0].title == "Walwal incident"
    assert restored.events[0].state_changes["ITA"].war_support == 5
