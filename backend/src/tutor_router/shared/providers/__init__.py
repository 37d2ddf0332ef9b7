"""Provider routing and health-management engine.

Picks a provider per logical feature, tracks provider health from reported
outcomes, and heals failing providers after a cooldown.
"""

from tutor_router.shared.providers.types import (
    FeatureConfig,
    HealthRecord,
    Provider,
    SystemStatus,
)
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.health import HealthMonitor
from tutor_router.shared.providers.router import ProviderRouter
from tutor_router.shared.providers.reporter import OutcomeReporter
from tutor_router.shared.providers.sweeper import RecoverySweeper
from tutor_router.shared.providers.engine import RoutingEngine
from tutor_router.shared.providers.gateway import RoutedExecutor

__all__ = [
    "FeatureConfig",
    "FeatureRoutingTable",
    "HealthMonitor",
    "HealthRecord",
    "OutcomeReporter",
    "Provider",
    "ProviderCatalog",
    "ProviderRouter",
    "RecoverySweeper",
    "RoutedExecutor",
    "RoutingEngine",
    "SystemStatus",
]
