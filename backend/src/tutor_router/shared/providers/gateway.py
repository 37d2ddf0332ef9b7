"""Routed executor: select a provider, call it, report the outcome, retry.

The engine decides which provider to use; the caller's function performs
the actual request.  Failures and timeouts are reported back as outcomes
and the next eligible provider is tried, for at most ``max_retries`` calls
in total.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

import structlog

from tutor_router.domain.exceptions import RoutingExhaustedError
from tutor_router.shared.providers.engine import RoutingEngine
from tutor_router.shared.providers.types import Provider

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_S = 60.0


class RoutedExecutor:
    """Failover loop for one feature request.

    Usage::

        executor = RoutedExecutor(engine)

        audio = await executor.execute(
            "narration",
            lambda provider: synthesize(provider.provider_id, text),
        )

    ``request_fn`` receives the selected ``Provider`` and must return the
    result or raise on failure.
    """

    def __init__(self, engine: RoutingEngine, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._engine = engine
        self._timeout = timeout_s

    @property
    def timeout_s(self) -> float:
        return self._timeout

    async def execute(
        self,
        feature: str,
        request_fn: Callable[[Provider], Awaitable[T]],
        *,
        timeout_s: float | None = None,
    ) -> T:
        """Run ``request_fn`` against routed providers until one succeeds.

        Raises:
            UnknownFeatureError: The feature is not configured.
            RoutingExhaustedError: Attempts ran out or no eligible provider
                remained; ``errors`` maps each tried provider to its failure.
        """
        config = self._engine.get_feature_config(feature)
        timeout = timeout_s if timeout_s is not None else self._timeout
        errors: dict[str, str] = {}
        attempted: set[str] = set()

        for attempt in range(config.max_retries):
            try:
                provider_id = self._engine.select_provider(feature, exclude=attempted)
            except RoutingExhaustedError:
                break
            attempted.add(provider_id)
            provider = self._engine.get_provider(provider_id)
            log = logger.bind(feature=feature, provider=provider_id, attempt=attempt + 1)

            start = time.monotonic()
            try:
                result = await asyncio.wait_for(request_fn(provider), timeout=timeout)
            except asyncio.TimeoutError:
                latency_ms = (time.monotonic() - start) * 1000
                errors[provider_id] = f"Timeout after {timeout}s"
                self._engine.report(provider_id, False, latency_ms)
                log.warning("provider_timeout", timeout_s=timeout)
                continue
            except Exception as exc:
                latency_ms = (time.monotonic() - start) * 1000
                errors[provider_id] = f"{type(exc).__name__}: {exc}"
                self._engine.report(provider_id, False, latency_ms)
                log.warning(
                    "provider_request_failed",
                    error=errors[provider_id],
                    latency_ms=round(latency_ms, 1),
                )
                continue

            latency_ms = (time.monotonic() - start) * 1000
            self._engine.report(provider_id, True, latency_ms)
            log.info("provider_request_success", latency_ms=round(latency_ms, 1))
            if len(attempted) > 1:
                logger.info(
                    "provider_failover_success",
                    feature=feature,
                    provider=provider_id,
                    failed_providers=sorted(attempted - {provider_id}),
                )
            return result

        raise RoutingExhaustedError(feature, errors)
