"""Read-only queries over a save's event log.

The log itself is append-only; these helpers only sort and filter copies.
"""

from pax_historia.errors import EventNotFound
from pax_historia.models import Event, Save

DEFAULT_LIMIT = 50
IMPORTANT_LIMIT = 30

_SEVERITY_RANK = {"critical": 3, "major": 2}


def _newest_first(events: list[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.game_date, e.created_at), reverse=True)


def list_events(save: Save, limit: int = DEFAULT_LIMIT) -> list[Event]:
    return _newest_first(save.events)[:limit]


def events_for_turn(save: Save, turn_number: int) -> list[Event]:
    """Events of one turn, critical first, then major, then the rest in log order."""
    events = [e for e in save.events if e.turn_number == turn_number]
    return sorted(events, key=lambda e: _SEVERITY_RANK.get(e.severity, 1), reverse=True)


def events_by_type(save: Save, event_type: str, limit: int = DEFAULT_LIMIT) -> list[Event]:
    return _newest_first([e for e in save.events if e.event_type == event_type])[:limit]


def events_for_nation(save: Save, code: str, limit: int = DEFAULT_LIMIT) -> list[Event]:
    code = code.upper()
    return _newest_first([e for e in save.events if code in e.affected_nations])[:limit]


def important_events(save: Save, limit: int = IMPORTANT_LIMIT) -> list[Event]:
    return _newest_first(
        [e for e in save.events if e.severity in ("major", "critical")]
    )[:limit]


def get_event(save: Save, event_id: str) -> Event:
    for event in save.events:
        if event.id == event_id:
            return event
    raise EventNotFound(event_id)


def event_stats(save: Save) -> list[dict]:
    """Event counts grouped by (event_type, severity), in first-seen order."""
    stats: dict[tuple[str, str], dict] = {}
    for event in save.events:
        key = (event.event_type, event.severity)
        entry = stats.setdefault(
            key, {"event_type": event.event_type, "severity": event.severity, "count": 0}
        )
        entry["count"] += 1
    return list(stats.values())
