"""
sessionguard.api.app

FastAPI app factory.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sessionguard import __version__
from sessionguard.api.routers.health import router as health_router
from sessionguard.api.routers.sessions import router as sessions_router
from sessionguard.db.init_db import init_db
from sessionguard.db.session import create_engine, create_sessionmaker
from sessionguard.observability.logging import configure_logging, get_logger
from sessionguard.observability.middleware import RequestContextMiddleware
from sessionguard.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="sessionguard",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(sessions_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Guarded routes are declared by the routers themselves through
# `auth.deps.require_roles(scope, pre=[...])`.
