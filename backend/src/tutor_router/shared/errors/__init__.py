"""Global exception handlers: map domain errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
import structlog

from tutor_router.domain.exceptions import (
    ConfigError,
    DomainError,
    RoutingExhaustedError,
    UnknownFeatureError,
    UnknownProviderError,
)

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain→HTTP exception mappings."""

    @app.exception_handler(UnknownFeatureError)
    async def handle_unknown_feature(
        request: Request, exc: UnknownFeatureError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=404,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(UnknownProviderError)
    async def handle_unknown_provider(
        request: Request, exc: UnknownProviderError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=404,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(ConfigError)
    async def handle_config(request: Request, exc: ConfigError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(RoutingExhaustedError)
    async def handle_exhausted(
        request: Request, exc: RoutingExhaustedError
    ) -> ORJSONResponse:
        logger.warning("routing_exhausted_http", feature=exc.feature)
        return ORJSONResponse(
            status_code=503,
            content={
                "code": exc.code,
                "message": exc.message,
                "details": {"feature": exc.feature, "errors": exc.errors},
            },
        )

    @app.exception_handler(DomainError)
    async def handle_domain(request: Request, exc: DomainError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        return ORJSONResponse(
            status_code=500,
            content={
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            },
        )
