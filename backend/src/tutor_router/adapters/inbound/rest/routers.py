"""Health, Providers, Features: REST routers for the admin surface."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tutor_router import __version__
from tutor_router.application.dtos import (
    ActiveRequest,
    ErrorResponse,
    FeatureConfigResponse,
    FeatureConfigUpdate,
    HealthResponse,
    OutcomeRequest,
    ProviderHealthResponse,
    ProviderResponse,
    SelectionResponse,
    SystemStatusResponse,
)
from tutor_router.config import Settings
from tutor_router.dependencies import get_app_settings, get_engine
from tutor_router.shared.providers.engine import RoutingEngine

_NOT_FOUND = {404: {"model": ErrorResponse}}
_INVALID_CONFIG = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    engine: RoutingEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    return HealthResponse(
        version=__version__,
        environment=settings.app_env.value,
        sweeper_running=engine.sweeper.running,
    )


@health_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  Providers
# ═══════════════════════════════════════════════════════════════
providers_router = APIRouter(prefix="/providers", tags=["Provider Health"])


@providers_router.get("", response_model=list[ProviderResponse])
async def list_providers(engine: RoutingEngine = Depends(get_engine)) -> list[ProviderResponse]:
    return [ProviderResponse.from_provider(p) for p in engine.catalog]


@providers_router.get("/status", response_model=SystemStatusResponse)
async def system_status(engine: RoutingEngine = Depends(get_engine)) -> SystemStatusResponse:
    """Aggregate provider counts for dashboards."""
    return SystemStatusResponse.from_status(engine.get_system_status())


@providers_router.get("/health", response_model=list[ProviderHealthResponse])
async def provider_health(
    engine: RoutingEngine = Depends(get_engine),
) -> list[ProviderHealthResponse]:
    """Health snapshots for every catalog provider."""
    return [ProviderHealthResponse.from_record(r) for r in engine.get_all_health()]


@providers_router.post(
    "/{provider_id:path}/outcome",
    response_model=ProviderHealthResponse,
    responses=_NOT_FOUND,
)
async def report_outcome(
    provider_id: str,
    body: OutcomeRequest,
    engine: RoutingEngine = Depends(get_engine),
) -> ProviderHealthResponse:
    """Report the result of a call made outside this service."""
    record = engine.report(provider_id, body.success, body.latency_ms)
    return ProviderHealthResponse.from_record(record)


@providers_router.post(
    "/{provider_id:path}/active",
    response_model=ProviderResponse,
    responses=_NOT_FOUND,
)
async def set_active(
    provider_id: str,
    body: ActiveRequest,
    engine: RoutingEngine = Depends(get_engine),
) -> ProviderResponse:
    """Admin: enable or disable a provider."""
    return ProviderResponse.from_provider(engine.set_provider_active(provider_id, body.active))


@providers_router.post("/{provider_id:path}/reset", responses=_NOT_FOUND)
async def reset_provider(
    provider_id: str,
    engine: RoutingEngine = Depends(get_engine),
) -> dict:
    """Admin: force a provider back to healthy."""
    engine.reset_provider(provider_id)
    return {"status": "reset", "provider_id": provider_id}


# ═══════════════════════════════════════════════════════════════
#  Features
# ═══════════════════════════════════════════════════════════════
features_router = APIRouter(prefix="/features", tags=["Feature Routing"])


@features_router.get("", response_model=list[str])
async def list_features(engine: RoutingEngine = Depends(get_engine)) -> list[str]:
    return engine.table.features()


@features_router.get("/{feature}", response_model=FeatureConfigResponse, responses=_NOT_FOUND)
async def get_feature(
    feature: str,
    engine: RoutingEngine = Depends(get_engine),
) -> FeatureConfigResponse:
    return FeatureConfigResponse.from_config(engine.get_feature_config(feature))


@features_router.patch(
    "/{feature}",
    response_model=FeatureConfigResponse,
    responses=_INVALID_CONFIG,
)
async def update_feature(
    feature: str,
    body: FeatureConfigUpdate,
    engine: RoutingEngine = Depends(get_engine),
) -> FeatureConfigResponse:
    """Merge the supplied fields into the feature's routing config."""
    config = engine.update_feature_config(feature, **body.changes())
    return FeatureConfigResponse.from_config(config)


@features_router.post(
    "/{feature}/select",
    response_model=SelectionResponse,
    responses={**_NOT_FOUND, 503: {"model": ErrorResponse}},
)
async def select_provider(
    feature: str,
    engine: RoutingEngine = Depends(get_engine),
) -> SelectionResponse:
    """Pick the provider the caller should use for ``feature`` right now."""
    return SelectionResponse(feature=feature, provider_id=engine.select_provider(feature))
