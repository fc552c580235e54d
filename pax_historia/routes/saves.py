"""Save lifecycle, turn advancement and map state endpoints."""

from fastapi import APIRouter, HTTPException

from pax_historia import engine, storage

from .deps import RuntimeDep
from .models import AdvanceBody, NewGameBody, RenameSaveBody

router = APIRouter()


@router.post("/saves")
async def create_save(body: NewGameBody, rt: RuntimeDep):
    """Start a new game as the given nation."""
    save = engine.new_game(rt.registry, body.nation_code, body.start_date)
    return {
        "save_id": save.id,
        "player_nation": rt.registry[save.player_nation_code],
        "current_date": save.current_date,
        "turn_number": save.turn_number,
    }


@router.get("/saves")
async def list_saves(rt: RuntimeDep):
    """All saves, most recently played first."""
    names = {code: n.name for code, n in rt.registry.items()}
    return storage.list_save_summaries(names)


@router.get("/saves/{save_id}")
async def get_save(save_id: str, rt: RuntimeDep):
    """Full save document plus the player's registry entry."""
    save = storage.load_save(save_id)
    return {**save.model_dump(), "player_nation": rt.registry.get(save.player_nation_code)}


@router.patch("/saves/{save_id}")
async def rename_save(save_id: str, body: RenameSaveBody):
    save = await engine.rename(save_id, body.name)
    return {"ok": True, "name": save.name}


@router.delete("/saves/{save_id}")
async def delete_save(save_id: str):
    async with storage.save_lock(save_id):
        deleted = storage.delete_save(save_id)
    if not deleted:
        raise HTTPException(404, "Save not found")
    return {"ok": True}


@router.post("/saves/{save_id}/advance")
async def advance(save_id: str, body: AdvanceBody, rt: RuntimeDep):
    """Run one turn. Observers are notified before and after."""
    if not storage.save_exists(save_id):
        raise HTTPException(404, "Save not found")
    await rt.broadcaster.broadcast(
        {"type": "time_advance_start", "save_id": save_id, "time_jump": body.time_jump}
    )
    result = await rt.turns.advance_time(save_id, body.time_jump)
    await rt.broadcaster.broadcast(
        {"type": "time_advance_complete", "save_id": save_id, "data": result.model_dump()}
    )
    return result


@router.get("/saves/{save_id}/occupations")
async def occupations(save_id: str):
    """region id -> occupying nation code."""
    return engine.occupations(storage.load_save(save_id))


@router.get("/saves/{save_id}/nations/{code}")
async def nation_state(save_id: str, code: str, rt: RuntimeDep):
    """Registry entry merged with the nation's state in this save."""
    return engine.nation_with_state(storage.load_save(save_id), rt.registry, code)
