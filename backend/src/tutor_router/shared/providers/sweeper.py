"""Recovery sweeper: periodic long-cooldown healing of idle providers.

Providers that stop receiving traffic never hit the lazy short-recovery
check, so this task heals them on a timer.  It runs as one supervised
asyncio task with explicit start/stop; a pass never overlaps another pass.
"""

from __future__ import annotations

import asyncio
import threading

import structlog

from tutor_router.shared.observability.metrics import SWEEP_RUNS
from tutor_router.shared.providers.health import HealthMonitor

logger = structlog.get_logger(__name__)

DEFAULT_SWEEP_INTERVAL_S = 5 * 60.0


class RecoverySweeper:
    """Background task invoking ``HealthMonitor.sweep_long_recovery``."""

    def __init__(
        self,
        health: HealthMonitor,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_S,
    ) -> None:
        self._health = health
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._guard = threading.Lock()
        self._passes = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def passes(self) -> int:
        """Number of completed sweep passes."""
        return self._passes

    def start(self) -> None:
        """Start the periodic task (no-op if already running)."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._sweep_loop(self._stop_event))
        logger.info("recovery_sweeper_started", interval_s=self._interval)

    async def stop(self) -> None:
        """Stop scheduling ticks and wait for an in-flight tick to finish."""
        task, self._task = self._task, None
        if self._stop_event is not None:
            self._stop_event.set()
        if task is not None and not task.done():
            await task
        logger.info("recovery_sweeper_stopped", passes=self._passes)

    def run_once(self, now: float | None = None) -> list[str] | None:
        """Run a single pass; returns healed ids, or ``None`` if one is already running."""
        if not self._guard.acquire(blocking=False):
            SWEEP_RUNS.labels(result="skipped").inc()
            logger.debug("recovery_sweep_skipped_busy")
            return None
        try:
            healed = self._health.sweep_long_recovery(now)
            self._passes += 1
        finally:
            self._guard.release()

        SWEEP_RUNS.labels(result="completed").inc()
        logger.debug("recovery_sweep_completed", healed=healed)
        return healed

    # ── Internals ────────────────────────────────────────────
    async def _sweep_loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break
            try:
                self.run_once()
            except Exception:
                SWEEP_RUNS.labels(result="failed").inc()
                logger.exception("recovery_sweep_failed")
