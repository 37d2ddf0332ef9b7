"""Core types for the provider routing engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from tutor_router.domain.enums import ProviderCategory


@dataclass(frozen=True)
class Provider:
    """Static facts about a single backend provider.

    Attributes:
        provider_id:    Unique identifier (e.g. "gemma2-9b-it", "elevenlabs").
        category:       Capability the provider serves.
        unit_cost:      Relative cost per 1k units (tokens or characters).
        capacity_limit: Max units per request (0 = unlimited).
        priority:       Lower = preferred when listing a category.
        active:         Administratively disabled providers are never selected.
        name:           Human-readable display name.
        vendor:         Upstream vendor hosting the provider (e.g. "groq").
        strengths:      Free-form capability tags for dashboards.
    """

    provider_id: str
    category: ProviderCategory
    unit_cost: float = 0.0
    capacity_limit: int = 0
    priority: int = 10
    active: bool = True
    name: str = ""
    vendor: str = ""
    strengths: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name or self.provider_id


@dataclass(frozen=True)
class FeatureConfig:
    """Primary + ordered fallbacks for one logical feature.

    Frozen so that no two features can ever share a mutable config; updates
    go through ``dataclasses.replace``.

    Attributes:
        max_retries:  Total provider calls ``RoutedExecutor`` makes for one
                      request, first attempt included (1 = no failover).
        cost_ceiling: Max ``unit_cost`` a candidate may have; ``None`` = no limit.
    """

    feature: str
    primary: str
    fallbacks: tuple[str, ...] = ()
    max_retries: int = 3
    cost_ceiling: float | None = None
    category: ProviderCategory | None = None

    @property
    def candidates(self) -> tuple[str, ...]:
        """Primary followed by fallbacks, in configured order."""
        return (self.primary, *self.fallbacks)


@dataclass
class HealthRecord:
    """Mutable per-provider trust state (owned by ``HealthMonitor``)."""

    provider_id: str
    is_healthy: bool = True
    consecutive_failures: int = 0
    last_checked: float = 0.0
    average_latency_ms: float = 0.0
    latency_samples: int = 0
    total_successes: int = 0
    total_failures: int = 0


@dataclass
class SystemStatus:
    """Read-only dashboard snapshot of the whole engine."""

    total_providers: int
    healthy_count: int
    unhealthy_count: int
    by_category: dict[str, int] = field(default_factory=dict)
    by_cost_bucket: dict[str, int] = field(default_factory=dict)
    by_vendor: dict[str, int] = field(default_factory=dict)
    avg_cost_by_vendor: dict[str, float] = field(default_factory=dict)
