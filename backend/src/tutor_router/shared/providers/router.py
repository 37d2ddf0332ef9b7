"""Provider router: picks the provider to call for a feature right now.

Walks the feature's primary and then its fallbacks in configured order and
returns the first one that is active, within the cost ceiling, and healthy.
Order in configuration is the only preference signal; nothing is re-ranked
by latency or price.

When every candidate is rejected the emergency default is tried.  It must be
active and healthy like any candidate but is exempt from the cost ceiling.
"""

from __future__ import annotations

import structlog

from tutor_router.domain.enums import RoutingOutcome
from tutor_router.domain.exceptions import RoutingExhaustedError
from tutor_router.shared.observability.metrics import ROUTING_DECISIONS
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.health import HealthMonitor
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.types import FeatureConfig

logger = structlog.get_logger(__name__)


class ProviderRouter:
    """Selects one provider id per call; never writes health state itself."""

    def __init__(
        self,
        catalog: ProviderCatalog,
        table: FeatureRoutingTable,
        health: HealthMonitor,
        *,
        emergency_default: str | None = None,
    ) -> None:
        self._catalog = catalog
        self._table = table
        self._health = health
        self._emergency_default = emergency_default

    @property
    def emergency_default(self) -> str | None:
        return self._emergency_default

    def select_provider(self, feature: str, *, exclude: set[str] | None = None) -> str:
        """Return the provider id to use for ``feature``.

        Args:
            feature: Logical feature name.
            exclude: Provider ids to skip for this call only.

        Raises:
            UnknownFeatureError: The feature is not configured.
            RoutingExhaustedError: No candidate qualifies and there is no
                usable emergency default.
        """
        config = self._table.get(feature)
        exclude = exclude or set()
        rejected: dict[str, str] = {}

        for position, provider_id in enumerate(config.candidates):
            if provider_id in exclude:
                rejected[provider_id] = "excluded"
                continue
            reason = self._ineligibility(config, provider_id)
            if reason is not None:
                rejected[provider_id] = reason
                continue

            if position == 0:
                ROUTING_DECISIONS.labels(feature=feature, outcome=RoutingOutcome.PRIMARY.value).inc()
                logger.debug("routing_primary_selected", feature=feature, provider=provider_id)
            else:
                ROUTING_DECISIONS.labels(feature=feature, outcome=RoutingOutcome.FALLBACK.value).inc()
                logger.info(
                    "routing_fallback_selected",
                    feature=feature,
                    provider=provider_id,
                    rejected=rejected,
                )
            return provider_id

        emergency = self._emergency_default
        if emergency:
            if emergency in exclude:
                rejected[emergency] = "excluded"
            elif (reason := self._ineligibility(config, emergency, enforce_cost=False)) is not None:
                rejected[emergency] = reason
            else:
                ROUTING_DECISIONS.labels(
                    feature=feature, outcome=RoutingOutcome.EMERGENCY.value
                ).inc()
                logger.warning(
                    "routing_emergency_default",
                    feature=feature,
                    provider=emergency,
                    rejected=rejected,
                )
                return emergency

        ROUTING_DECISIONS.labels(feature=feature, outcome=RoutingOutcome.EXHAUSTED.value).inc()
        logger.warning("routing_exhausted", feature=feature, rejected=rejected)
        raise RoutingExhaustedError(feature, rejected)

    # ── Gates ────────────────────────────────────────────────
    def _ineligibility(
        self, config: FeatureConfig, provider_id: str, *, enforce_cost: bool = True
    ) -> str | None:
        """Why a candidate cannot be used, or ``None`` if it can.

        Health is checked last so inactive or over-budget providers never
        trigger lazy recovery.  The emergency default skips the cost gate.
        """
        provider = self._catalog.get(provider_id)
        if not provider.active:
            return "inactive"
        if (
            enforce_cost
            and config.cost_ceiling is not None
            and provider.unit_cost > config.cost_ceiling
        ):
            return "over_cost_ceiling"
        if not self._health.is_healthy(provider_id):
            return "unhealthy"
        return None
