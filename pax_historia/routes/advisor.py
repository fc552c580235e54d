"""Strategic advisor endpoints. Generation failures come back as advisor text."""

from fastapi import APIRouter

from .deps import RuntimeDep
from .models import AskBody, StrategicBody

router = APIRouter()


@router.post("/saves/{save_id}/advisor/ask")
async def ask(save_id: str, body: AskBody, rt: RuntimeDep):
    return await rt.advisor.ask(save_id, body.question)


@router.get("/saves/{save_id}/advisor/summary")
async def summary(save_id: str, rt: RuntimeDep):
    return await rt.advisor.summary(save_id)


@router.post("/saves/{save_id}/advisor/strategic")
async def strategic(save_id: str, body: StrategicBody, rt: RuntimeDep):
    return await rt.advisor.strategic(save_id, body.focus)


@router.get("/saves/{save_id}/advisor/suggestions")
async def suggestions(save_id: str, rt: RuntimeDep):
    return await rt.advisor.suggestions(save_id)


@router.post("/saves/{save_id}/advisor/brainstorm")
async def brainstorm(save_id: str, rt: RuntimeDep):
    """Five candidate actions for the player to consider."""
    return await rt.advisor.brainstorm(save_id)
