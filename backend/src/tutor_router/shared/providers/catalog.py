"""Provider catalog: read-mostly lookup of static provider facts."""

from __future__ import annotations

import dataclasses
import threading
from typing import Iterable, Iterator

import structlog

from tutor_router.domain.enums import ProviderCategory
from tutor_router.domain.exceptions import ConfigError, UnknownProviderError
from tutor_router.shared.providers.types import Provider

logger = structlog.get_logger(__name__)


class ProviderCatalog:
    """Thread-safe catalog of providers keyed by id.

    Only the ``active`` flag may change after load; it is toggled by swapping
    in a new frozen ``Provider`` so readers never see a half-written entry.
    """

    def __init__(self, providers: Iterable[Provider]) -> None:
        self._providers: dict[str, Provider] = {}
        for provider in providers:
            if provider.provider_id in self._providers:
                raise ConfigError(f"duplicate provider id {provider.provider_id!r}")
            self._providers[provider.provider_id] = provider
        self._lock = threading.Lock()

    def get(self, provider_id: str) -> Provider:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise UnknownProviderError(provider_id)
        return provider

    def list_by_category(self, category: ProviderCategory) -> list[Provider]:
        """Active providers of a category, lowest priority rank first."""
        return sorted(
            (p for p in self._providers.values() if p.category == category and p.active),
            key=lambda p: p.priority,
        )

    def all(self) -> list[Provider]:
        return list(self._providers.values())

    def set_active(self, provider_id: str, active: bool) -> Provider:
        """Administratively enable or disable a provider."""
        with self._lock:
            current = self.get(provider_id)
            if current.active == active:
                return current
            updated = dataclasses.replace(current, active=active)
            self._providers[provider_id] = updated
        logger.info("provider_active_toggled", provider=provider_id, active=active)
        return updated

    def estimate_cost(self, provider_id: str, units: int) -> float:
        """Relative cost of ``units`` tokens/characters on a provider."""
        return self.get(provider_id).unit_cost * units / 1000

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __iter__(self) -> Iterator[Provider]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._providers)
