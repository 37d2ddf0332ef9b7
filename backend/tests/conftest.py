"""Shared test fixtures."""

from __future__ import annotations

import os
import sys

import pytest

# Add src to path so imports work
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from tutor_router.domain.enums import ProviderCategory
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.types import FeatureConfig, Provider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def providers() -> list[Provider]:
    return [
        Provider("p1", ProviderCategory.SPEECH_SYNTHESIS, unit_cost=0.3, priority=1, vendor="elevenlabs"),
        Provider("p2", ProviderCategory.SPEECH_SYNTHESIS, unit_cost=0.015, priority=2, vendor="openai"),
        Provider("p3", ProviderCategory.SPEECH_SYNTHESIS, unit_cost=0.0, priority=3, vendor="browser"),
        Provider("chat", ProviderCategory.TEXT_GENERATION, unit_cost=0.0, priority=1, vendor="groq"),
        Provider("chat-paid", ProviderCategory.TEXT_GENERATION, unit_cost=0.002, priority=5, vendor="openai"),
        Provider("emergency", ProviderCategory.TEXT_GENERATION, unit_cost=0.00027, priority=20, vendor="deepseek"),
    ]


@pytest.fixture
def catalog(providers: list[Provider]) -> ProviderCatalog:
    return ProviderCatalog(providers)


@pytest.fixture
def table(catalog: ProviderCatalog) -> FeatureRoutingTable:
    return FeatureRoutingTable(
        catalog,
        [
            FeatureConfig(
                feature="narration",
                primary="p1",
                fallbacks=("p2", "p3"),
                category=ProviderCategory.SPEECH_SYNTHESIS,
            ),
            FeatureConfig(
                feature="general_chat",
                primary="chat-paid",
                fallbacks=("chat",),
                cost_ceiling=0.0,
                category=ProviderCategory.TEXT_GENERATION,
            ),
        ],
    )
