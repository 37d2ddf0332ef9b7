"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.  Individual
provider failures are not exceptions here: they are reported as outcomes
and only influence later routing.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Configuration ────────────────────────────────────────────
class ConfigError(DomainError):
    """Routing configuration is invalid or references something unknown."""

    def __init__(self, message: str, *, code: str = "CONFIG_ERROR") -> None:
        super().__init__(message, code=code)


class UnknownFeatureError(ConfigError):
    def __init__(self, feature: str) -> None:
        super().__init__(f"unknown feature {feature!r}", code="UNKNOWN_FEATURE")
        self.feature = feature


class UnknownProviderError(ConfigError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(f"unknown provider {provider_id!r}", code="UNKNOWN_PROVIDER")
        self.provider_id = provider_id


# ── Routing ──────────────────────────────────────────────────
class RoutingExhaustedError(DomainError):
    """Every candidate for a feature is unhealthy, inactive, or over budget."""

    def __init__(self, feature: str, errors: dict[str, str] | None = None) -> None:
        self.feature = feature
        self.errors = dict(errors or {})
        detail = f": {', '.join(self.errors)}" if self.errors else ""
        super().__init__(
            f"No eligible provider for feature {feature!r}{detail}",
            code="ROUTING_EXHAUSTED",
        )
