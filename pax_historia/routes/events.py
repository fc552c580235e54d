"""Event log queries."""

from fastapi import APIRouter

from pax_historia import events, storage

router = APIRouter()


@router.get("/saves/{save_id}/events")
async def list_events(save_id: str, limit: int = events.DEFAULT_LIMIT):
    """Newest events first."""
    return events.list_events(storage.load_save(save_id), limit)


@router.get("/saves/{save_id}/events/turn/{turn_number}")
async def turn_events(save_id: str, turn_number: int):
    return events.events_for_turn(storage.load_save(save_id), turn_number)


@router.get("/saves/{save_id}/events/type/{event_type}")
async def type_events(save_id: str, event_type: str):
    return events.events_by_type(storage.load_save(save_id), event_type)


@router.get("/saves/{save_id}/events/nation/{code}")
async def nation_events(save_id: str, code: str):
    return events.events_for_nation(storage.load_save(save_id), code)


@router.get("/saves/{save_id}/events/important")
async def important_events(save_id: str):
    """Major and critical events only."""
    return events.important_events(storage.load_save(save_id))


@router.get("/saves/{save_id}/events/stats")
async def event_stats(save_id: str):
    return events.event_stats(storage.load_save(save_id))


@router.get("/saves/{save_id}/events/{event_id}")
async def get_event(save_id: str, event_id: str):
    return events.get_event(storage.load_save(save_id), event_id)
