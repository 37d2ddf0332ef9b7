"""Dependency wiring: builds the routing engine and exposes it to routes.

The engine is constructed once per application by ``build_engine`` and kept
on ``app.state``; route handlers receive it through ``get_engine``.
"""

from __future__ import annotations

from fastapi import Request

from tutor_router.adapters.outbound.routing_config import load_from_settings
from tutor_router.config import Settings
from tutor_router.shared.providers.engine import RoutingEngine
from tutor_router.shared.providers.gateway import RoutedExecutor


def build_engine(settings: Settings) -> RoutingEngine:
    """Load the routing document named in settings and wire an engine."""
    catalog, table = load_from_settings(settings)
    return RoutingEngine.from_settings(settings, catalog, table)


def build_executor(engine: RoutingEngine, settings: Settings) -> RoutedExecutor:
    """Failover executor for in-process provider calls, kept on ``app.state``."""
    return RoutedExecutor(engine, timeout_s=settings.provider_timeout_seconds)


def get_engine(request: Request) -> RoutingEngine:
    return request.app.state.engine


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
