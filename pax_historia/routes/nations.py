"""Static nation registry endpoints."""

from fastapi import APIRouter

from .deps import RuntimeDep

router = APIRouter()


@router.get("/nations")
async def list_nations(rt: RuntimeDep):
    """All nations, major powers first, then by name."""
    return rt.registry.sorted_for_display()


@router.get("/nations/major")
async def major_nations(rt: RuntimeDep):
    return rt.registry.major_powers()


@router.get("/nations/{code}")
async def get_nation(code: str, rt: RuntimeDep):
    return rt.registry.require(code)
