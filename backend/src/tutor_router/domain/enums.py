"""Domain enumerations for provider routing."""

from __future__ import annotations

import enum


class ProviderCategory(str, enum.Enum):
    """Capability a provider serves."""

    TEXT_GENERATION = "text_generation"
    SPEECH_SYNTHESIS = "speech_synthesis"
    TRANSLATION = "translation"
    TRANSCRIPTION = "transcription"


class CostBucket(str, enum.Enum):
    """Coarse relative-cost band used by the status dashboard."""

    FREE = "free"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def for_cost(cls, unit_cost: float) -> CostBucket:
        if unit_cost <= 0:
            return cls.FREE
        if unit_cost <= 0.001:
            return cls.LOW
        if unit_cost <= 0.01:
            return cls.MEDIUM
        return cls.HIGH


class RoutingOutcome(str, enum.Enum):
    """Which branch of the selection algorithm produced a decision."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    EMERGENCY = "emergency"
    EXHAUSTED = "exhausted"
