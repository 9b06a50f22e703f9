from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import deps
from core.config import Settings, load_settings
from core.errors import install_error_handlers
from core.pinata import PinataClient
from core.store import RecordStore, build_store
from monitoring import router as monitoring_router
from projects import router as projects_router
from submissions import router as submissions_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    store: RecordStore | None = None,
    content_store: PinataClient | None = None,
) -> FastAPI:
    """
    Build the API. `store` and `content_store` default to the configured
    backends; tests pass their own.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Open the record store once per process.
        owns_store = store is None
        app.state.store = store if store is not None else await build_store(settings)
        logger.info("api_started storage=%s", app.state.store.backend)
        try:
            yield
        finally:
            if owns_store:
                await app.state.store.close()
            app.state.store = None

    app = FastAPI(title="restoration-registry", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = None
    app.state.content_store = content_store or PinataClient.from_settings(settings)

    origins = list(settings.cors_allow_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    install_error_handlers(app)

    app.include_router(submissions_router.router, tags=["submissions"])
    app.include_router(projects_router.router, tags=["projects"])
    app.include_router(monitoring_router.router, tags=["monitoring"])

    @app.get("/health")
    def health(record_store: RecordStore = Depends(deps.get_store)) -> dict:
        return {"status": "ok", "storage": record_store.backend}

    @app.get("/")
    def root() -> dict:
        return {"message": "restoration-registry api"}

    return app


def serve() -> None:
    """
    Console entry point: serve the API with uvicorn on HOST:PORT.
    """
    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


app = create_app()
