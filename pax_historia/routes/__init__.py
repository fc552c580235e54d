"""FastAPI API endpoints under /api.

Endpoint groups: settings/health, nations (static registry), saves (lifecycle,
turn advancement, map state), actions, events, chats (diplomacy), advisor,
units, and the /ws notification feed. Everything that belongs to one
playthrough is nested under /api/saves/{save_id}/.
"""

from fastapi import APIRouter

from .actions import router as actions_router
from .advisor import router as advisor_router
from .chats import router as chats_router
from .events import router as events_router
from .nations import router as nations_router
from .saves import router as saves_router
from .settings import router as settings_router
from .units import router as units_router
from .ws import router as ws_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(nations_router)
router.include_router(saves_router)
router.include_router(actions_router)
router.include_router(events_router)
router.include_router(chats_router)
router.include_router(advisor_router)
router.include_router(units_router)
router.include_router(ws_router)
