"""Tutor Router: Application Configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "tutor-router"
    app_env: Environment = Environment.DEVELOPMENT
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # ── Routing config source ────────────────────────────────
    # Empty = use the built-in catalog and feature table
    routing_config_path: str = ""
    allow_feature_creation: bool = False
    emergency_default_provider: str = "deepseek/deepseek-chat"

    # ── Health monitor ───────────────────────────────────────
    failure_threshold: int = Field(3, ge=1)
    short_recovery_seconds: float = 600.0
    long_recovery_seconds: float = 1800.0
    latency_ema_alpha: float = 0.5

    # ── Recovery sweeper ─────────────────────────────────────
    sweep_interval_seconds: float = 300.0

    # ── Routed executor ──────────────────────────────────────
    provider_timeout_seconds: float = 60.0

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def emergency_default(self) -> str | None:
        return self.emergency_default_provider.strip() or None

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator(
        "short_recovery_seconds",
        "long_recovery_seconds",
        "sweep_interval_seconds",
        "provider_timeout_seconds",
    )
    @classmethod
    def _positive_duration(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("durations must be positive")
        return v

    @field_validator("latency_ema_alpha")
    @classmethod
    def _validate_alpha(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("latency_ema_alpha must be in (0, 1]")
        return v

    @model_validator(mode="after")
    def _check_recovery_order(self) -> Settings:
        if self.long_recovery_seconds < self.short_recovery_seconds:
            raise ValueError(
                "long_recovery_seconds must not be shorter than short_recovery_seconds"
            )
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
