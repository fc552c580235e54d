"""Player action endpoints (queued orders consumed by the next turn)."""

from fastapi import APIRouter

from pax_historia import engine, storage
from pax_historia.models import Action

from .deps import RuntimeDep
from .models import ActionBody

router = APIRouter()


def _with_names(actions: list[Action], rt) -> list[dict]:
    return [
        {**a.model_dump(), "nation_name": rt.registry.name_of(a.nation_code)}
        for a in actions
    ]


@router.post("/saves/{save_id}/actions")
async def submit_action(save_id: str, body: ActionBody, rt: RuntimeDep):
    """Queue an action for the next turn. Actions are always accepted."""
    action = await engine.submit_action(save_id, body.action_text, body.action_type)
    await rt.broadcaster.broadcast({"type": "new_action", "data": action.model_dump()})
    return {"ok": True, "action": action}


@router.get("/saves/{save_id}/actions")
async def list_actions(save_id: str, rt: RuntimeDep):
    return _with_names(storage.load_save(save_id).actions, rt)


@router.get("/saves/{save_id}/actions/pending")
async def pending_actions(save_id: str, rt: RuntimeDep):
    return _with_names(storage.load_save(save_id).pending_actions(), rt)


@router.get("/saves/{save_id}/actions/current")
async def current_actions(save_id: str, rt: RuntimeDep):
    """Actions submitted during the current turn, pending or not."""
    return _with_names(engine.current_turn_actions(storage.load_save(save_id)), rt)


@router.delete("/saves/{save_id}/actions/{action_id}")
async def delete_action(save_id: str, action_id: str):
    """Withdraw a pending action. Processed actions cannot be deleted."""
    deleted = await engine.delete_action(save_id, action_id)
    return {"ok": True, "deleted": deleted}
