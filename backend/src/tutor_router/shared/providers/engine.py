"""Routing engine: the explicitly constructed entry-point for callers.

Composes ProviderCatalog, FeatureRoutingTable, HealthMonitor, ProviderRouter,
OutcomeReporter and RecoverySweeper into one instance that is passed to
whoever needs it.  Lifecycle is explicit: ``await engine.start()`` launches
the sweeper and ``await engine.shutdown()`` stops it.

Usage::

    engine = RoutingEngine(catalog, table, emergency_default="deepseek/deepseek-chat")
    await engine.start()

    provider_id = engine.select_provider("narration")
    ...  # call the provider
    engine.report(provider_id, success=True, latency_ms=420.0)

    await engine.shutdown()
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any, Callable

import structlog

from tutor_router.config import Settings
from tutor_router.domain.enums import CostBucket
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.health import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_LATENCY_ALPHA,
    DEFAULT_LONG_RECOVERY_S,
    DEFAULT_SHORT_RECOVERY_S,
    HealthMonitor,
)
from tutor_router.shared.providers.reporter import OutcomeReporter
from tutor_router.shared.providers.router import ProviderRouter
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.sweeper import DEFAULT_SWEEP_INTERVAL_S, RecoverySweeper
from tutor_router.shared.providers.types import (
    FeatureConfig,
    HealthRecord,
    Provider,
    SystemStatus,
)

logger = structlog.get_logger(__name__)


class RoutingEngine:
    """In-process provider routing and health-management engine."""

    def __init__(
        self,
        catalog: ProviderCatalog,
        table: FeatureRoutingTable,
        *,
        emergency_default: str | None = None,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        short_recovery_seconds: float = DEFAULT_SHORT_RECOVERY_S,
        long_recovery_seconds: float = DEFAULT_LONG_RECOVERY_S,
        latency_alpha: float = DEFAULT_LATENCY_ALPHA,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if emergency_default is not None:
            # Raises UnknownProviderError for ids outside the catalog
            catalog.get(emergency_default)

        self._catalog = catalog
        self._table = table
        self._health = HealthMonitor(
            failure_threshold=failure_threshold,
            short_recovery_seconds=short_recovery_seconds,
            long_recovery_seconds=long_recovery_seconds,
            latency_alpha=latency_alpha,
            clock=clock,
        )
        self._router = ProviderRouter(
            catalog, table, self._health, emergency_default=emergency_default
        )
        self._reporter = OutcomeReporter(catalog, self._health)
        self._sweeper = RecoverySweeper(self._health, interval_seconds=sweep_interval_seconds)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        catalog: ProviderCatalog,
        table: FeatureRoutingTable,
        **overrides: Any,
    ) -> RoutingEngine:
        kwargs: dict[str, Any] = {
            "emergency_default": settings.emergency_default,
            "failure_threshold": settings.failure_threshold,
            "short_recovery_seconds": settings.short_recovery_seconds,
            "long_recovery_seconds": settings.long_recovery_seconds,
            "latency_alpha": settings.latency_ema_alpha,
            "sweep_interval_seconds": settings.sweep_interval_seconds,
        }
        kwargs.update(overrides)
        return cls(catalog, table, **kwargs)

    # ── Components ───────────────────────────────────────────
    @property
    def catalog(self) -> ProviderCatalog:
        return self._catalog

    @property
    def table(self) -> FeatureRoutingTable:
        return self._table

    @property
    def health(self) -> HealthMonitor:
        return self._health

    @property
    def reporter(self) -> OutcomeReporter:
        return self._reporter

    @property
    def sweeper(self) -> RecoverySweeper:
        return self._sweeper

    # ── Lifecycle ────────────────────────────────────────────
    async def start(self) -> None:
        self._sweeper.start()
        logger.info(
            "routing_engine_started",
            providers=len(self._catalog),
            features=len(self._table.features()),
            emergency_default=self._router.emergency_default,
        )

    async def shutdown(self) -> None:
        await self._sweeper.stop()
        logger.info("routing_engine_shutdown")

    async def __aenter__(self) -> RoutingEngine:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # ── Routing surface ──────────────────────────────────────
    def select_provider(self, feature: str, *, exclude: set[str] | None = None) -> str:
        return self._router.select_provider(feature, exclude=exclude)

    def report(
        self, provider_id: str, success: bool, latency_ms: float | None = None
    ) -> HealthRecord:
        return self._reporter.report(provider_id, success, latency_ms)

    def get_feature_config(self, feature: str) -> FeatureConfig:
        return self._table.get(feature)

    def update_feature_config(self, feature: str, **changes: Any) -> FeatureConfig:
        return self._table.update(feature, **changes)

    def get_provider(self, provider_id: str) -> Provider:
        return self._catalog.get(provider_id)

    # ── Administration ───────────────────────────────────────
    def set_provider_active(self, provider_id: str, active: bool) -> Provider:
        return self._catalog.set_active(provider_id, active)

    def reset_provider(self, provider_id: str) -> None:
        """Admin reset: force a provider back to healthy."""
        self._catalog.get(provider_id)
        self._health.reset(provider_id)

    # ── Observation ──────────────────────────────────────────
    def get_health(self, provider_id: str) -> HealthRecord:
        """Health snapshot; providers never referenced yet read as a fresh record."""
        self._catalog.get(provider_id)
        return self._health.snapshot(provider_id) or HealthRecord(provider_id=provider_id)

    def get_all_health(self) -> list[HealthRecord]:
        return [self.get_health(p.provider_id) for p in self._catalog]

    def get_system_status(self) -> SystemStatus:
        """Dashboard counts over the catalog.

        Uses non-mutating snapshots, so a provider whose short cooldown has
        elapsed still counts as unhealthy until something queries it.
        """
        records = self._health.snapshot_all()
        providers = self._catalog.all()

        unhealthy = sum(
            1
            for p in providers
            if (r := records.get(p.provider_id)) is not None and not r.is_healthy
        )

        by_category: dict[str, int] = defaultdict(int)
        by_bucket: dict[str, int] = defaultdict(int)
        by_vendor: dict[str, int] = defaultdict(int)
        costs_by_vendor: dict[str, list[float]] = defaultdict(list)
        for p in providers:
            vendor = p.vendor or "unknown"
            by_category[p.category.value] += 1
            by_bucket[CostBucket.for_cost(p.unit_cost).value] += 1
            by_vendor[vendor] += 1
            costs_by_vendor[vendor].append(p.unit_cost)

        return SystemStatus(
            total_providers=len(providers),
            healthy_count=len(providers) - unhealthy,
            unhealthy_count=unhealthy,
            by_category=dict(by_category),
            by_cost_bucket=dict(by_bucket),
            by_vendor=dict(by_vendor),
            avg_cost_by_vendor={
                vendor: sum(costs) / len(costs) for vendor, costs in costs_by_vendor.items()
            },
        )
