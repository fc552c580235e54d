"""Tests for event log queries."""

import pytest

from pax_historia import events
from pax_historia.errors import EventNotFound
from pax_historia.models import Event


def _event(title, *, date="1936-01-01", turn=1, severity="minor", event_type="political",
           nations=(), created_at=None):
    extra = {"created_at": created_at} if created_at else {}
    return Event(
        title=title,
        game_date=date,
        turn_number=turn,
        severity=severity,
        event_type=event_type,
        affected_nations=list(nations),
        **extra,
    )


@pytest.fixture
def log(save):
    save.events = [
        _event("A", date="1936-01-01", turn=1, severity="minor", nations=["ITA"],
               created_at="2026-01-01T00:00:00.000001+00:00"),
        _event("B", date="1936-01-01", turn=1, severity="critical", event_type="military",
               nations=["ETH", "ITA"], created_at="2026-01-01T00:00:00.000002+00:00"),
        _event("C", date="1936-01-01", turn=1, severity="major",
               created_at="2026-01-01T00:00:00.000003+00:00"),
        _event("D", date="1936-01-08", turn=2, severity="moderate", event_type="military",
               nations=["GER"], created_at="2026-01-01T00:00:00.000004+00:00"),
    ]
    return save


def test_list_newest_first(log):
    assert [e.title for e in events.list_events(log)] == ["D", "C", "B", "A"]
    assert [e.title for e in events.list_events(log, limit=2)] == ["D", "C"]


def test_turn_sorted_by_severity(log):
    assert [e.title for e in events.events_for_turn(log, 1)] == ["B", "C", "A"]
    assert events.events_for_turn(log, 9) == []


def test_by_type(log):
    assert [e.title for e in events.events_by_type(log, "military")] == ["D", "B"]


def test_for_nation_is_case_insensitive(log):
    assert [e.title for e in events.events_for_nation(log, "ita")] == ["B", "A"]


def test_important(log):
    assert [e.title for e in events.important_events(log)] == ["C", "B"]


def test_get_event(log):
    target = log.events[2]
    assert events.get_event(log, target.id) is target
    with pytest.raises(EventNotFound):
        events.get_event(log, "nope")


def test_stats(log):
    log.events.append(_event("E", severity="minor"))
    stats = events.event_stats(log)
    assert stats[0] == {"event_type": "political", "severity": "minor", "count": 2}
    assert {"event_type": "military", "severity": "critical", "count": 1} in stats
    assert len(stats) == 4


def test_empty_log(save):
    assert events.list_events(save) == []
    assert events.event_stats(save) == []
