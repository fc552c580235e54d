"""Health check and game default settings."""

from fastapi import APIRouter

from pax_historia import storage
from pax_historia.engine import parse_game_date

from .models import UpdateSettingsBody

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Defaults applied to new games (start date, world context, simulation rules)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: UpdateSettingsBody):
    """Update game defaults (partial merge)."""
    fields = body.model_dump(exclude_none=True)
    if "start_date" in fields:
        parse_game_date(fields["start_date"])
    return storage.update_config(fields)
