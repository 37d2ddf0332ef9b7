"""Routing configuration loader.

Parses a JSON routing document (providers + feature chains) with pydantic
and converts it into the catalog and routing table the engine consumes.
When no document path is configured the built-in defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tutor_router.config import Settings
from tutor_router.domain.enums import ProviderCategory
from tutor_router.domain.exceptions import ConfigError
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.types import FeatureConfig, Provider

logger = structlog.get_logger(__name__)


class ProviderSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    category: ProviderCategory
    unit_cost: float = Field(0.0, ge=0)
    capacity_limit: int = Field(0, ge=0)
    priority: int = 10
    active: bool = True
    name: str = ""
    vendor: str = ""
    strengths: list[str] = Field(default_factory=list)


class FeatureSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    primary: str = Field(..., min_length=1)
    fallbacks: list[str] = Field(default_factory=list)
    max_retries: int = Field(3, ge=1)
    cost_ceiling: float | None = Field(None, ge=0)
    category: ProviderCategory | None = None


class RoutingDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    providers: list[ProviderSpec]
    features: dict[str, FeatureSpec] = Field(default_factory=dict)

    @field_validator("providers")
    @classmethod
    def _unique_ids(cls, v: list[ProviderSpec]) -> list[ProviderSpec]:
        seen: set[str] = set()
        for spec in v:
            if spec.id in seen:
                raise ValueError(f"duplicate provider id {spec.id!r}")
            seen.add(spec.id)
        return v


def load_routing_document(path: str | Path) -> RoutingDocument:
    """Read and validate a JSON routing document."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read routing config {str(path)!r}: {exc}") from exc
    try:
        document = RoutingDocument.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid routing config {str(path)!r}: {exc}") from exc
    logger.info(
        "routing_config_loaded",
        path=str(path),
        providers=len(document.providers),
        features=len(document.features),
    )
    return document


def build_catalog(document: RoutingDocument) -> ProviderCatalog:
    return ProviderCatalog(
        Provider(
            provider_id=spec.id,
            category=spec.category,
            unit_cost=spec.unit_cost,
            capacity_limit=spec.capacity_limit,
            priority=spec.priority,
            active=spec.active,
            name=spec.name,
            vendor=spec.vendor,
            strengths=tuple(spec.strengths),
        )
        for spec in document.providers
    )


def build_routing_table(
    document: RoutingDocument,
    catalog: ProviderCatalog,
    *,
    allow_create: bool = False,
) -> FeatureRoutingTable:
    return FeatureRoutingTable(
        catalog,
        (
            FeatureConfig(
                feature=name,
                primary=spec.primary,
                fallbacks=tuple(spec.fallbacks),
                max_retries=spec.max_retries,
                cost_ceiling=spec.cost_ceiling,
                category=spec.category,
            )
            for name, spec in document.features.items()
        ),
        allow_create=allow_create,
    )


def load_from_settings(settings: Settings) -> tuple[ProviderCatalog, FeatureRoutingTable]:
    """Build catalog + table from the configured document, or the defaults."""
    from tutor_router.adapters.outbound.routing_config.defaults import DEFAULT_ROUTING_DOCUMENT

    if settings.routing_config_path:
        document = load_routing_document(settings.routing_config_path)
    else:
        document = DEFAULT_ROUTING_DOCUMENT
    catalog = build_catalog(document)
    table = build_routing_table(document, catalog, allow_create=settings.allow_feature_creation)
    return catalog, table


__all__ = [
    "FeatureSpec",
    "ProviderSpec",
    "RoutingDocument",
    "build_catalog",
    "build_routing_table",
    "load_from_settings",
    "load_routing_document",
]
