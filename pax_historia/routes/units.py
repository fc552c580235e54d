"""Military unit endpoints. Units only move; there is no combat model."""

from fastapi import APIRouter

from pax_historia import engine, storage

from .models import CreateUnitBody, MoveUnitBody

router = APIRouter()


@router.get("/saves/{save_id}/units")
async def list_units(save_id: str, nation_code: str | None = None, region_id: str | None = None):
    return engine.filter_units(storage.load_save(save_id), nation_code, region_id)


@router.post("/saves/{save_id}/units", status_code=201)
async def create_unit(save_id: str, body: CreateUnitBody):
    """Create a unit. Strength, organization and experience are clamped to 0-100."""
    return await engine.create_unit(save_id, **body.model_dump())


@router.get("/saves/{save_id}/units/{unit_id}")
async def get_unit(save_id: str, unit_id: str):
    return storage.load_save(save_id).find_unit(unit_id)


@router.put("/saves/{save_id}/units/{unit_id}/move")
async def move_unit(save_id: str, unit_id: str, body: MoveUnitBody):
    return await engine.move_unit(save_id, unit_id, body.to_region_id)
