"""Data Transfer Objects: Pydantic models for API boundaries.

DTOs adapt between the HTTP surface and the engine's dataclasses; the
engine itself never sees them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tutor_router.domain.enums import ProviderCategory
from tutor_router.shared.providers.types import (
    FeatureConfig,
    HealthRecord,
    Provider,
    SystemStatus,
)


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None  # type: ignore[type-arg]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    sweeper_running: bool = False


# ═══════════════════════════════════════════════════════════════
#  Features
# ═══════════════════════════════════════════════════════════════
class FeatureConfigResponse(BaseModel):
    feature: str
    primary: str
    fallbacks: list[str]
    max_retries: int
    cost_ceiling: float | None
    category: ProviderCategory | None

    @classmethod
    def from_config(cls, config: FeatureConfig) -> FeatureConfigResponse:
        return cls(
            feature=config.feature,
            primary=config.primary,
            fallbacks=list(config.fallbacks),
            max_retries=config.max_retries,
            cost_ceiling=config.cost_ceiling,
            category=config.category,
        )


class FeatureConfigUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="forbid")

    primary: str | None = Field(None, min_length=1)
    fallbacks: list[str] | None = None
    max_retries: int | None = Field(None, ge=1)
    cost_ceiling: float | None = Field(None, ge=0)
    category: ProviderCategory | None = None

    def changes(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        # Only cost_ceiling and category may be cleared with an explicit null
        data = {
            k: v for k, v in data.items() if v is not None or k in ("cost_ceiling", "category")
        }
        if "fallbacks" in data:
            data["fallbacks"] = tuple(data["fallbacks"])
        return data


class SelectionResponse(BaseModel):
    feature: str
    provider_id: str


# ═══════════════════════════════════════════════════════════════
#  Providers
# ═══════════════════════════════════════════════════════════════
class OutcomeRequest(BaseModel):
    success: bool
    latency_ms: float | None = Field(None, ge=0)


class ActiveRequest(BaseModel):
    active: bool


class ProviderResponse(BaseModel):
    provider_id: str
    name: str
    category: ProviderCategory
    vendor: str
    unit_cost: float
    priority: int
    active: bool

    @classmethod
    def from_provider(cls, provider: Provider) -> ProviderResponse:
        return cls(
            provider_id=provider.provider_id,
            name=provider.display_name,
            category=provider.category,
            vendor=provider.vendor,
            unit_cost=provider.unit_cost,
            priority=provider.priority,
            active=provider.active,
        )


class ProviderHealthResponse(BaseModel):
    provider_id: str
    is_healthy: bool
    consecutive_failures: int
    average_latency_ms: float
    total_successes: int
    total_failures: int

    @classmethod
    def from_record(cls, record: HealthRecord) -> ProviderHealthResponse:
        return cls(
            provider_id=record.provider_id,
            is_healthy=record.is_healthy,
            consecutive_failures=record.consecutive_failures,
            average_latency_ms=round(record.average_latency_ms, 2),
            total_successes=record.total_successes,
            total_failures=record.total_failures,
        )


class SystemStatusResponse(BaseModel):
    total_providers: int
    healthy_count: int
    unhealthy_count: int
    by_category: dict[str, int]
    by_cost_bucket: dict[str, int]
    by_vendor: dict[str, int]
    avg_cost_by_vendor: dict[str, float]

    @classmethod
    def from_status(cls, status: SystemStatus) -> SystemStatusResponse:
        return cls(
            total_providers=status.total_providers,
            healthy_count=status.healthy_count,
            unhealthy_count=status.unhealthy_count,
            by_category=status.by_category,
            by_cost_bucket=status.by_cost_bucket,
            by_vendor=status.by_vendor,
            avg_cost_by_vendor=status.avg_cost_by_vendor,
        )
