"""
rgpd_compliance.api.app

FastAPI app factory for the RGPD compliance service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rgpd_compliance import __version__
from rgpd_compliance.api.error_handlers import register_error_handlers
from rgpd_compliance.api.routers.admin import router as admin_router
from rgpd_compliance.api.routers.audit import router as audit_router
from rgpd_compliance.api.routers.breaches import router as breaches_router
from rgpd_compliance.api.routers.companies import router as companies_router
from rgpd_compliance.api.routers.dashboard import router as dashboard_router
from rgpd_compliance.api.routers.dev_auth import router as dev_auth_router
from rgpd_compliance.api.routers.diagnostic import router as diagnostic_router
from rgpd_compliance.api.routers.dpia import router as dpia_router
from rgpd_compliance.api.routers.dpia_evaluations import router as dpia_evaluations_router
from rgpd_compliance.api.routers.health import router as health_router
from rgpd_compliance.api.routers.records import router as records_router
from rgpd_compliance.api.routers.requests import router as requests_router
from rgpd_compliance.db.init_db import init_db
from rgpd_compliance.db.session import create_engine, create_sessionmaker
from rgpd_compliance.observability.logging import configure_logging, get_logger
from rgpd_compliance.observability.middleware import RequestContextMiddleware
from rgpd_compliance.settings import Settings

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
            # Prod runs Alembic migrations instead.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="RGPD Compliance Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(companies_router)
    app.include_router(records_router)
    app.include_router(dpia_evaluations_router)
    app.include_router(dpia_router)
    app.include_router(breaches_router)
    app.include_router(requests_router)
    app.include_router(diagnostic_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)
    app.include_router(audit_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business logic stays in routers/services/rules.
