"""Health monitor: per-provider trust state with two recovery paths.

State machine per provider:
    HEALTHY   → (N consecutive failures)                  → UNHEALTHY
    UNHEALTHY → (any success)                             → HEALTHY
    UNHEALTHY → (queried ≥ short cooldown after last check) → HEALTHY
    UNHEALTHY → (sweep ≥ long cooldown after last check)    → HEALTHY

A single lock guards the whole record map.  Every read-modify-write
(outcome recording, the lazy short-recovery check, each sweep step)
happens under it, so concurrent reports for one provider are never lost.
"""

from __future__ import annotations

import dataclasses
import threading
import time
from typing import Callable

import structlog

from tutor_router.shared.observability.metrics import (
    PROVIDER_HEALTH_TRANSITIONS,
    PROVIDER_HEALTHY,
    PROVIDER_OUTCOMES,
    PROVIDER_RECOVERIES,
)
from tutor_router.shared.providers.types import HealthRecord

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_SHORT_RECOVERY_S = 10 * 60.0
DEFAULT_LONG_RECOVERY_S = 30 * 60.0
DEFAULT_LATENCY_ALPHA = 0.5


class HealthMonitor:
    """Thread-safe store of ``HealthRecord`` keyed by provider id."""

    def __init__(
        self,
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        short_recovery_seconds: float = DEFAULT_SHORT_RECOVERY_S,
        long_recovery_seconds: float = DEFAULT_LONG_RECOVERY_S,
        latency_alpha: float = DEFAULT_LATENCY_ALPHA,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._failure_threshold = failure_threshold
        self._short_recovery = short_recovery_seconds
        self._long_recovery = long_recovery_seconds
        self._alpha = latency_alpha
        self._clock = clock

        self._records: dict[str, HealthRecord] = {}
        self._lock = threading.Lock()

    @property
    def failure_threshold(self) -> int:
        return self._failure_threshold

    def now(self) -> float:
        return self._clock()

    # ── Recording ────────────────────────────────────────────
    def record_outcome(
        self, provider_id: str, success: bool, latency_ms: float | None = None
    ) -> HealthRecord:
        """Apply one call outcome and return a snapshot of the new state."""
        with self._lock:
            record = self._get_or_create(provider_id)
            record.last_checked = self._clock()

            if success:
                was_healthy = record.is_healthy
                record.is_healthy = True
                record.consecutive_failures = 0
                record.total_successes += 1
                if latency_ms is not None and latency_ms >= 0:
                    self._update_latency(record, latency_ms)
                if not was_healthy:
                    PROVIDER_HEALTH_TRANSITIONS.labels(provider=provider_id, transition="healthy").inc()
                    logger.info("provider_marked_healthy", provider=provider_id, reason="success")
            else:
                record.consecutive_failures += 1
                record.total_failures += 1
                if record.is_healthy and record.consecutive_failures >= self._failure_threshold:
                    record.is_healthy = False
                    PROVIDER_HEALTH_TRANSITIONS.labels(provider=provider_id, transition="unhealthy").inc()
                    logger.warning(
                        "provider_marked_unhealthy",
                        provider=provider_id,
                        failures=record.consecutive_failures,
                    )

            PROVIDER_OUTCOMES.labels(
                provider=provider_id, result="success" if success else "failure"
            ).inc()
            PROVIDER_HEALTHY.labels(provider=provider_id).set(1 if record.is_healthy else 0)
            return dataclasses.replace(record)

    # ── Queries ──────────────────────────────────────────────
    def is_healthy(self, provider_id: str) -> bool:
        """Health check with lazy short-cooldown recovery.

        A provider with no record yet is healthy; its record is created on
        first reference.
        """
        with self._lock:
            record = self._get_or_create(provider_id)
            if record.is_healthy:
                return True

            elapsed = self._clock() - record.last_checked
            if elapsed >= self._short_recovery:
                self._heal(record)
                PROVIDER_RECOVERIES.labels(provider=provider_id, path="short").inc()
                logger.info(
                    "provider_auto_recovered",
                    provider=provider_id,
                    path="short",
                    unhealthy_s=round(elapsed, 1),
                )
                return True
            return False

    def snapshot(self, provider_id: str) -> HealthRecord | None:
        """Copy of the current record without applying any recovery rule."""
        with self._lock:
            record = self._records.get(provider_id)
            return dataclasses.replace(record) if record else None

    def snapshot_all(self) -> dict[str, HealthRecord]:
        with self._lock:
            return {pid: dataclasses.replace(r) for pid, r in self._records.items()}

    # ── Recovery ─────────────────────────────────────────────
    def sweep_long_recovery(self, now: float | None = None) -> list[str]:
        """Force-heal providers unhealthy for at least the long cooldown.

        Each record is examined under its own lock acquisition; the pass as a
        whole is not atomic.

        Returns:
            Ids of the providers healed by this pass.
        """
        with self._lock:
            provider_ids = list(self._records)

        healed: list[str] = []
        for provider_id in provider_ids:
            with self._lock:
                record = self._records[provider_id]
                if record.is_healthy:
                    continue
                current = self._clock() if now is None else now
                elapsed = current - record.last_checked
                if elapsed < self._long_recovery:
                    continue
                self._heal(record)
            healed.append(provider_id)
            PROVIDER_RECOVERIES.labels(provider=provider_id, path="sweep").inc()
            logger.info(
                "provider_auto_recovered",
                provider=provider_id,
                path="sweep",
                unhealthy_s=round(elapsed, 1),
            )
        return healed

    def reset(self, provider_id: str) -> None:
        """Force-heal a provider (for admin override)."""
        with self._lock:
            record = self._get_or_create(provider_id)
            was_healthy = record.is_healthy
            self._heal(record)
        if not was_healthy:
            PROVIDER_RECOVERIES.labels(provider=provider_id, path="admin").inc()
        logger.info("provider_health_force_reset", provider=provider_id)

    # ── Internals ────────────────────────────────────────────
    def _get_or_create(self, provider_id: str) -> HealthRecord:
        """Caller must hold lock."""
        record = self._records.get(provider_id)
        if record is None:
            record = HealthRecord(provider_id=provider_id, last_checked=self._clock())
            self._records[provider_id] = record
        return record

    def _heal(self, record: HealthRecord) -> None:
        """Caller must hold lock."""
        if not record.is_healthy:
            PROVIDER_HEALTH_TRANSITIONS.labels(provider=record.provider_id, transition="healthy").inc()
        record.is_healthy = True
        record.consecutive_failures = 0
        PROVIDER_HEALTHY.labels(provider=record.provider_id).set(1)

    def _update_latency(self, record: HealthRecord, latency_ms: float) -> None:
        """Exponential moving average; the first sample seeds it. Caller holds lock."""
        if record.latency_samples == 0:
            record.average_latency_ms = float(latency_ms)
        else:
            record.average_latency_ms = (
                self._alpha * latency_ms + (1 - self._alpha) * record.average_latency_ms
            )
        record.latency_samples += 1
