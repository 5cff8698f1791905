import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .middleware import activity_middleware
from .routers import api, public
from .services.retention import RetentionSweeper
from .services.store import RetentionPolicy, StatusStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[StatusStore] = None) -> FastAPI:
    settings = settings or Settings()
    if store is None:
        store = StatusStore(RetentionPolicy(window=settings.retention_window,
                                            period=settings.sweep_period))

    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)
    app.state.settings = settings
    app.state.store = store
    app.state.sweeper = RetentionSweeper(store)

    # ---- middleware
    activity_middleware(app, settings.MAX_BODY_BYTES)

    @app.on_event("startup")
    async def _start_sweeper():
        app.state.sweeper.start()

    @app.on_event("shutdown")
    async def _stop_sweeper():
        await app.state.sweeper.stop()

    # ---- routers API
    app.include_router(public.router)
    app.include_router(api.router)

    # ---- estáticos (dashboard) al final para no tapar /api
    if settings.STATIC_DIR.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.STATIC_DIR), html=True), name="static")
    else:
        logger.warning("Directorio de estáticos no encontrado: %s", settings.STATIC_DIR)

    return app


app = create_app()
