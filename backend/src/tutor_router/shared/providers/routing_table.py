"""Feature routing table: maps logical features to provider chains.

Configs are frozen dataclasses; an update builds a new instance and swaps it
in under the table lock, so concurrent readers see either the old or the new
chain and no other feature is ever affected.
"""

from __future__ import annotations

import dataclasses
import threading
from typing import Any, Iterable

import structlog

from tutor_router.domain.enums import ProviderCategory
from tutor_router.domain.exceptions import ConfigError, UnknownFeatureError
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.types import FeatureConfig

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = frozenset({"primary", "fallbacks", "max_retries", "cost_ceiling", "category"})


class FeatureRoutingTable:
    """Thread-safe ``feature -> FeatureConfig`` table."""

    def __init__(
        self,
        catalog: ProviderCatalog,
        configs: Iterable[FeatureConfig] = (),
        *,
        allow_create: bool = False,
    ) -> None:
        self._catalog = catalog
        self._allow_create = allow_create
        self._configs: dict[str, FeatureConfig] = {}
        self._lock = threading.Lock()
        for config in configs:
            self.register(config)

    @property
    def allow_create(self) -> bool:
        return self._allow_create

    def get(self, feature: str) -> FeatureConfig:
        config = self._configs.get(feature)
        if config is None:
            raise UnknownFeatureError(feature)
        return config

    def features(self) -> list[str]:
        return list(self._configs)

    def register(self, config: FeatureConfig) -> FeatureConfig:
        """Add a feature at load time; a duplicate name is a config error."""
        config = self._validate(config)
        with self._lock:
            if config.feature in self._configs:
                raise ConfigError(f"duplicate feature {config.feature!r}")
            self._configs[config.feature] = config
        return config

    def update(self, feature: str, **changes: Any) -> FeatureConfig:
        """Merge ``changes`` into the feature's config and return the result.

        Raises:
            ConfigError: Unknown field name or invalid value.
            UnknownProviderError: A referenced provider is not in the catalog.
            UnknownFeatureError: The feature does not exist and creation is
                not allowed (or ``primary`` is missing for a new feature).
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ConfigError(f"unrecognised feature config fields: {sorted(unknown)}")

        with self._lock:
            current = self._configs.get(feature)
            if current is None:
                if not self._allow_create:
                    raise UnknownFeatureError(feature)
                if not changes.get("primary"):
                    raise ConfigError(f"new feature {feature!r} requires a primary provider")
                updated = self._validate(FeatureConfig(feature=feature, **changes))
                created = True
            else:
                updated = self._validate(dataclasses.replace(current, **changes))
                created = False
            self._configs[feature] = updated

        logger.info(
            "feature_config_created" if created else "feature_config_updated",
            feature=feature,
            primary=updated.primary,
            fallbacks=list(updated.fallbacks),
            cost_ceiling=updated.cost_ceiling,
        )
        return updated

    # ── Validation ───────────────────────────────────────────
    def _validate(self, config: FeatureConfig) -> FeatureConfig:
        if not config.feature:
            raise ConfigError("feature name must not be empty")

        fallbacks = config.fallbacks
        if isinstance(fallbacks, str):
            raise ConfigError("fallbacks must be a sequence of provider ids")
        fallbacks = tuple(fallbacks)

        for provider_id in (config.primary, *fallbacks):
            # Raises UnknownProviderError for ids outside the catalog
            self._catalog.get(provider_id)

        if config.max_retries < 1:
            raise ConfigError("max_retries must be at least 1")
        if config.cost_ceiling is not None and config.cost_ceiling < 0:
            raise ConfigError("cost_ceiling must not be negative")

        category = config.category
        if category is not None and not isinstance(category, ProviderCategory):
            try:
                category = ProviderCategory(category)
            except ValueError as exc:
                raise ConfigError(f"unknown provider category {category!r}") from exc

        return dataclasses.replace(config, fallbacks=fallbacks, category=category)
