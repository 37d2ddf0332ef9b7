"""Outcome reporter: the feedback edge from provider callers into health."""

from __future__ import annotations

from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.health import HealthMonitor
from tutor_router.shared.providers.types import HealthRecord


class OutcomeReporter:
    """Validates the provider id, then records the outcome."""

    def __init__(self, catalog: ProviderCatalog, health: HealthMonitor) -> None:
        self._catalog = catalog
        self._health = health

    def report(
        self, provider_id: str, success: bool, latency_ms: float | None = None
    ) -> HealthRecord:
        self._catalog.get(provider_id)
        return self._health.record_outcome(provider_id, success, latency_ms)
