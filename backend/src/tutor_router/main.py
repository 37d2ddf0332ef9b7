"""FastAPI application entry-point.

Assembles routers, exception handlers, and lifecycle hooks around one
explicitly constructed routing engine.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from tutor_router import __version__
from tutor_router.adapters.inbound.rest.routers import (
    features_router,
    health_router,
    providers_router,
)
from tutor_router.config import Settings, get_settings
from tutor_router.dependencies import build_engine, build_executor
from tutor_router.shared.errors import register_exception_handlers
from tutor_router.shared.observability import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle: start the recovery sweeper, stop it on shutdown."""
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    logger.info("application_starting", env=settings.app_env.value)

    await app.state.engine.start()
    yield
    await app.state.engine.shutdown()
    logger.info("application_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory: creates a fully configured FastAPI instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Tutor Router",
        description=(
            "Provider routing and health management for the tutoring backend. "
            "Selects text, speech and translation providers per feature and "
            "reroutes around failing providers."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Store settings and the engine in app state for lifecycle access
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.executor = build_executor(app.state.engine, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── REST routers (versioned) ─────────────────────────────
    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    app.include_router(providers_router, prefix=api_v1)
    app.include_router(features_router, prefix=api_v1)

    return app


# Uvicorn entry-point
app = create_app()
