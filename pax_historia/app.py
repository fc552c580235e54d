import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pax_historia import storage
from pax_historia.config import Settings
from pax_historia.errors import GameValidationError, NotFoundError
from pax_historia.llm import LLM
from pax_historia.routes import router
from pax_historia.runtime import build_runtime

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, llm: LLM | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    storage.init_storage(settings.data_dir, presets_dir=settings.presets_dir)

    app = FastAPI(title="Pax Historia")
    app.state.runtime = build_runtime(settings, llm)
    app.include_router(router, prefix="/api")

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(GameValidationError)
    async def invalid(request: Request, exc: GameValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    logger.info(
        f"Pax Historia ready: {len(app.state.runtime.registry)} nations, "
        f"data in {settings.data_dir}"
    )
    return app
