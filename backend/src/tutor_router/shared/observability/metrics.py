"""Prometheus metrics for the provider routing engine."""

from __future__ import annotations

from prometheus_client import Counter, Gauge


# ── Routing metrics ──────────────────────────────────────────
ROUTING_DECISIONS = Counter(
    "provider_routing_decisions_total",
    "Provider selections by feature and selection branch",
    ["feature", "outcome"],  # primary / fallback / emergency / exhausted
)

# ── Health metrics ───────────────────────────────────────────
PROVIDER_OUTCOMES = Counter(
    "provider_outcomes_total",
    "Outcomes reported for provider calls",
    ["provider", "result"],  # success / failure
)

PROVIDER_HEALTH_TRANSITIONS = Counter(
    "provider_health_transitions_total",
    "Provider health flips",
    ["provider", "transition"],  # unhealthy / healthy
)

PROVIDER_RECOVERIES = Counter(
    "provider_recoveries_total",
    "Time-based provider recoveries",
    ["provider", "path"],  # short / sweep / admin
)

PROVIDER_HEALTHY = Gauge(
    "provider_healthy",
    "1 if the provider is currently considered healthy, else 0",
    ["provider"],
)

# ── Sweeper metrics ──────────────────────────────────────────
SWEEP_RUNS = Counter(
    "provider_recovery_sweeps_total",
    "Recovery sweeper passes",
    ["result"],  # completed / skipped / failed
)
