"""Tests for the provider routing engine.

Covers ProviderCatalog, FeatureRoutingTable, HealthMonitor, ProviderRouter,
OutcomeReporter, RecoverySweeper and the RoutingEngine facade.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from prometheus_client import REGISTRY

from tutor_router.config import get_settings
from tutor_router.domain.enums import CostBucket, ProviderCategory
from tutor_router.domain.exceptions import (
    ConfigError,
    RoutingExhaustedError,
    UnknownFeatureError,
    UnknownProviderError,
)
from tutor_router.shared.providers.catalog import ProviderCatalog
from tutor_router.shared.providers.engine import RoutingEngine
from tutor_router.shared.providers.health import HealthMonitor
from tutor_router.shared.providers.reporter import OutcomeReporter
from tutor_router.shared.providers.router import ProviderRouter
from tutor_router.shared.providers.routing_table import FeatureRoutingTable
from tutor_router.shared.providers.sweeper import RecoverySweeper
from tutor_router.shared.providers.types import FeatureConfig, Provider


def _fail(health: HealthMonitor, provider_id: str, times: int = 3) -> None:
    for _ in range(times):
        health.record_outcome(provider_id, False)


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


# ═══════════════════════════════════════════════════════════════
#  Fixtures
# ═══════════════════════════════════════════════════════════════
@pytest.fixture
def health(clock) -> HealthMonitor:
    return HealthMonitor(clock=clock)


@pytest.fixture
def router(catalog, table, health) -> ProviderRouter:
    return ProviderRouter(catalog, table, health)


@pytest.fixture
def engine(catalog, table, clock) -> RoutingEngine:
    return RoutingEngine(catalog, table, emergency_default="emergency", clock=clock)


# ═══════════════════════════════════════════════════════════════
#  ProviderCatalog
# ═══════════════════════════════════════════════════════════════
class TestProviderCatalog:
    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(ConfigError):
            ProviderCatalog(
                [
                    Provider("dup", ProviderCategory.TRANSLATION),
                    Provider("dup", ProviderCategory.TRANSLATION),
                ]
            )

    def test_get_unknown_raises(self, catalog: ProviderCatalog) -> None:
        with pytest.raises(UnknownProviderError) as exc_info:
            catalog.get("missing")
        assert exc_info.value.provider_id == "missing"
        assert exc_info.value.code == "UNKNOWN_PROVIDER"

    def test_list_by_category_orders_by_priority(self, catalog: ProviderCatalog) -> None:
        ids = [p.provider_id for p in catalog.list_by_category(ProviderCategory.SPEECH_SYNTHESIS)]
        assert ids == ["p1", "p2", "p3"]

    def test_list_by_category_skips_inactive(self, catalog: ProviderCatalog) -> None:
        catalog.set_active("p1", False)
        ids = [p.provider_id for p in catalog.list_by_category(ProviderCategory.SPEECH_SYNTHESIS)]
        assert ids == ["p2", "p3"]

    def test_list_by_category_empty(self, catalog: ProviderCatalog) -> None:
        assert catalog.list_by_category(ProviderCategory.TRANSCRIPTION) == []

    def test_set_active_swaps_instance(self, catalog: ProviderCatalog) -> None:
        before = catalog.get("p2")
        after = catalog.set_active("p2", False)
        assert before.active is True
        assert after.active is False
        assert catalog.get("p2") is after

    def test_set_active_noop_returns_current(self, catalog: ProviderCatalog) -> None:
        current = catalog.get("p3")
        assert catalog.set_active("p3", True) is current

    def test_estimate_cost(self, catalog: ProviderCatalog) -> None:
        assert catalog.estimate_cost("p1", 2000) == pytest.approx(0.6)
        assert catalog.estimate_cost("p3", 5000) == 0.0

    def test_container_protocol(self, catalog: ProviderCatalog) -> None:
        assert "p1" in catalog
        assert "nope" not in catalog
        assert len(catalog) == 6
        assert {p.provider_id for p in catalog} >= {"p1", "p2", "p3"}

    def test_display_name_falls_back_to_id(self) -> None:
        assert Provider("x", ProviderCategory.TRANSLATION).display_name == "x"
        assert Provider("x", ProviderCategory.TRANSLATION, name="X Model").display_name == "X Model"


# ═══════════════════════════════════════════════════════════════
#  FeatureRoutingTable
# ═══════════════════════════════════════════════════════════════
class TestFeatureRoutingTable:
    def test_get_unknown_feature(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(UnknownFeatureError) as exc_info:
            table.get("nope")
        assert exc_info.value.feature == "nope"

    def test_candidates_order(self, table: FeatureRoutingTable) -> None:
        assert table.get("narration").candidates == ("p1", "p2", "p3")

    def test_register_rejects_unknown_provider(self, catalog: ProviderCatalog) -> None:
        with pytest.raises(UnknownProviderError):
            FeatureRoutingTable(catalog, [FeatureConfig("f", primary="ghost")])

    def test_register_rejects_duplicate(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(ConfigError):
            table.register(FeatureConfig("narration", primary="p1"))

    def test_update_merges_fields(self, table: FeatureRoutingTable) -> None:
        updated = table.update("narration", fallbacks=["p3"], max_retries=2)
        assert updated.primary == "p1"
        assert updated.fallbacks == ("p3",)
        assert updated.max_retries == 2
        assert table.get("narration") == updated

    def test_update_leaves_other_features_alone(self, table: FeatureRoutingTable) -> None:
        before = table.get("general_chat")
        table.update("narration", primary="p2", fallbacks=("p3",))
        assert table.get("general_chat") is before

    def test_update_unknown_provider_keeps_old_config(self, table: FeatureRoutingTable) -> None:
        before = table.get("narration")
        with pytest.raises(UnknownProviderError):
            table.update("narration", fallbacks=("p2", "ghost"))
        assert table.get("narration") is before

    def test_update_unknown_field(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(ConfigError):
            table.update("narration", weight=3)

    def test_update_unknown_feature_without_create(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(UnknownFeatureError):
            table.update("quiz", primary="chat")

    def test_update_creates_when_allowed(self, catalog: ProviderCatalog) -> None:
        table = FeatureRoutingTable(catalog, allow_create=True)
        created = table.update("quiz", primary="chat", fallbacks=["emergency"])
        assert created.candidates == ("chat", "emergency")
        assert table.features() == ["quiz"]

    def test_create_requires_primary(self, catalog: ProviderCatalog) -> None:
        table = FeatureRoutingTable(catalog, allow_create=True)
        with pytest.raises(ConfigError):
            table.update("quiz", fallbacks=["chat"])

    def test_rejects_string_fallbacks(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(ConfigError):
            table.update("narration", fallbacks="p2")

    def test_rejects_invalid_retries_and_ceiling(self, table: FeatureRoutingTable) -> None:
        with pytest.raises(ConfigError):
            table.update("narration", max_retries=0)
        with pytest.raises(ConfigError):
            table.update("narration", cost_ceiling=-1.0)

    def test_category_coerced_from_string(self, table: FeatureRoutingTable) -> None:
        updated = table.update("narration", category="translation")
        assert updated.category is ProviderCategory.TRANSLATION
        with pytest.raises(ConfigError):
            table.update("narration", category="telepathy")

    def test_cost_ceiling_can_be_cleared(self, table: FeatureRoutingTable) -> None:
        assert table.update("general_chat", cost_ceiling=None).cost_ceiling is None


# ═══════════════════════════════════════════════════════════════
#  HealthMonitor
# ═══════════════════════════════════════════════════════════════
class TestHealthMonitor:
    def test_unknown_provider_is_healthy(self, health: HealthMonitor) -> None:
        assert health.snapshot("p1") is None
        assert health.is_healthy("p1")
        record = health.snapshot("p1")
        assert record is not None
        assert record.is_healthy
        assert record.consecutive_failures == 0

    def test_threshold_marks_unhealthy(self, health: HealthMonitor) -> None:
        _fail(health, "p1", 2)
        assert health.is_healthy("p1")
        record = health.record_outcome("p1", False)
        assert not record.is_healthy
        assert record.consecutive_failures == 3
        assert not health.is_healthy("p1")

    def test_success_resets_counter(self, health: HealthMonitor) -> None:
        _fail(health, "p1", 2)
        record = health.record_outcome("p1", True)
        assert record.consecutive_failures == 0
        _fail(health, "p1", 2)
        assert health.is_healthy("p1")

    def test_success_heals_unhealthy(self, health: HealthMonitor) -> None:
        _fail(health, "p1")
        record = health.record_outcome("p1", True, 80.0)
        assert record.is_healthy
        assert record.total_failures == 3
        assert record.total_successes == 1

    def test_failures_keep_counting_while_unhealthy(self, health: HealthMonitor) -> None:
        _fail(health, "p1", 5)
        record = health.snapshot("p1")
        assert record.consecutive_failures == 5
        assert not record.is_healthy

    def test_short_recovery_on_query(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        clock.advance(599)
        assert not health.is_healthy("p1")
        clock.advance(1)
        assert health.is_healthy("p1")
        record = health.snapshot("p1")
        assert record.is_healthy
        assert record.consecutive_failures == 0

    def test_failure_while_unhealthy_restarts_cooldown(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        clock.advance(500)
        health.record_outcome("p1", False)
        clock.advance(200)
        assert not health.is_healthy("p1")
        clock.advance(400)
        assert health.is_healthy("p1")

    def test_snapshot_does_not_recover(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        clock.advance(10_000)
        assert not health.snapshot("p1").is_healthy
        assert not health.snapshot_all()["p1"].is_healthy

    def test_snapshot_is_a_copy(self, health: HealthMonitor) -> None:
        health.record_outcome("p1", True)
        record = health.snapshot("p1")
        record.is_healthy = False
        assert health.is_healthy("p1")

    def test_long_recovery_sweep(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        _fail(health, "p2", 1)
        clock.advance(1799)
        assert health.sweep_long_recovery() == []
        clock.advance(1)
        assert health.sweep_long_recovery() == ["p1"]
        assert health.snapshot("p1").is_healthy
        assert health.snapshot("p1").consecutive_failures == 0

    def test_sweep_with_explicit_now(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        assert health.sweep_long_recovery(now=clock() + 1800) == ["p1"]

    def test_reset(self, health: HealthMonitor) -> None:
        _fail(health, "p1")
        health.reset("p1")
        assert health.is_healthy("p1")
        assert health.snapshot("p1").consecutive_failures == 0

    def test_latency_average(self, health: HealthMonitor) -> None:
        health.record_outcome("p1", True, 100.0)
        assert health.snapshot("p1").average_latency_ms == pytest.approx(100.0)
        health.record_outcome("p1", True, 200.0)
        assert health.snapshot("p1").average_latency_ms == pytest.approx(150.0)
        health.record_outcome("p1", True, 50.0)
        assert health.snapshot("p1").average_latency_ms == pytest.approx(100.0)

    def test_latency_ignored_on_failure_and_when_missing(self, health: HealthMonitor) -> None:
        health.record_outcome("p1", True, 100.0)
        health.record_outcome("p1", False, 9000.0)
        health.record_outcome("p1", True)
        record = health.snapshot("p1")
        assert record.average_latency_ms == pytest.approx(100.0)
        assert record.latency_samples == 1

    def test_custom_threshold(self, clock) -> None:
        health = HealthMonitor(failure_threshold=1, clock=clock)
        health.record_outcome("p1", False)
        assert not health.is_healthy("p1")

    def test_concurrent_failures_are_not_lost(self) -> None:
        health = HealthMonitor()
        provider_id = "concurrent-provider"
        labels = {"provider": provider_id, "transition": "unhealthy"}
        before = _sample("provider_health_transitions_total", labels)

        workers = 32
        barrier = threading.Barrier(workers)

        def fail_once() -> None:
            barrier.wait()
            health.record_outcome(provider_id, False)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            for future in [pool.submit(fail_once) for _ in range(workers)]:
                future.result()

        record = health.snapshot(provider_id)
        assert record.consecutive_failures == workers
        assert record.total_failures == workers
        assert not record.is_healthy
        assert _sample("provider_health_transitions_total", labels) - before == 1


# ═══════════════════════════════════════════════════════════════
#  ProviderRouter
# ═══════════════════════════════════════════════════════════════
class TestProviderRouter:
    def test_selects_primary(self, router: ProviderRouter) -> None:
        assert router.select_provider("narration") == "p1"

    def test_falls_back_in_order(self, router: ProviderRouter, health: HealthMonitor) -> None:
        _fail(health, "p1")
        assert router.select_provider("narration") == "p2"
        _fail(health, "p2")
        assert router.select_provider("narration") == "p3"

    def test_cost_ceiling_excludes_expensive_primary(
        self, router: ProviderRouter, health: HealthMonitor
    ) -> None:
        assert router.select_provider("general_chat") == "chat"
        # Over-budget candidates never reach the health check
        assert health.snapshot("chat-paid") is None

    def test_inactive_provider_skipped(
        self, router: ProviderRouter, catalog: ProviderCatalog, health: HealthMonitor
    ) -> None:
        catalog.set_active("p1", False)
        assert router.select_provider("narration") == "p2"
        assert health.snapshot("p1") is None

    def test_exclude(self, router: ProviderRouter) -> None:
        assert router.select_provider("narration", exclude={"p1", "p2"}) == "p3"

    def test_unknown_feature(self, router: ProviderRouter) -> None:
        with pytest.raises(UnknownFeatureError):
            router.select_provider("nope")

    def test_exhausted_without_emergency(self, router: ProviderRouter, health: HealthMonitor) -> None:
        for pid in ("p1", "p2", "p3"):
            _fail(health, pid)
        with pytest.raises(RoutingExhaustedError) as exc_info:
            router.select_provider("narration")
        assert exc_info.value.feature == "narration"
        assert exc_info.value.errors == {"p1": "unhealthy", "p2": "unhealthy", "p3": "unhealthy"}

    def test_emergency_default(self, catalog, table, health: HealthMonitor) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        for pid in ("p1", "p2", "p3"):
            _fail(health, pid)
        assert router.select_provider("narration") == "emergency"

    def test_unhealthy_emergency_default_exhausts(
        self, catalog, table, health: HealthMonitor
    ) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        for pid in ("p1", "p2", "p3", "emergency"):
            _fail(health, pid)
        with pytest.raises(RoutingExhaustedError) as exc_info:
            router.select_provider("narration")
        assert exc_info.value.errors["emergency"] == "unhealthy"

    def test_inactive_emergency_default_exhausts(
        self, catalog: ProviderCatalog, table, health: HealthMonitor
    ) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        catalog.set_active("emergency", False)
        for pid in ("p1", "p2", "p3"):
            _fail(health, pid)
        with pytest.raises(RoutingExhaustedError) as exc_info:
            router.select_provider("narration")
        assert exc_info.value.errors["emergency"] == "inactive"

    def test_emergency_default_recovers_after_cooldown(
        self, catalog, table, health: HealthMonitor, clock
    ) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        _fail(health, "emergency")
        clock.advance(300)
        for pid in ("p1", "p2", "p3"):
            _fail(health, pid)
        clock.advance(300)
        # Emergency cooldown has elapsed; the chain's has not
        assert router.select_provider("narration") == "emergency"

    def test_emergency_default_exempt_from_cost_ceiling(
        self, catalog, table, health: HealthMonitor
    ) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        _fail(health, "chat")
        # general_chat has a zero cost ceiling; the emergency default is paid
        assert router.select_provider("general_chat") == "emergency"

    def test_excluded_emergency_default_exhausts(self, catalog, table, health: HealthMonitor) -> None:
        router = ProviderRouter(catalog, table, health, emergency_default="emergency")
        with pytest.raises(RoutingExhaustedError):
            router.select_provider("narration", exclude={"p1", "p2", "p3", "emergency"})

    def test_recovered_primary_wins_again(
        self, router: ProviderRouter, health: HealthMonitor, clock
    ) -> None:
        _fail(health, "p1")
        assert router.select_provider("narration") == "p2"
        clock.advance(600)
        assert router.select_provider("narration") == "p1"

    def test_routing_decision_metric(self, router: ProviderRouter, health: HealthMonitor) -> None:
        labels = {"feature": "narration", "outcome": "fallback"}
        before = _sample("provider_routing_decisions_total", labels)
        _fail(health, "p1")
        router.select_provider("narration")
        assert _sample("provider_routing_decisions_total", labels) - before == 1


# ═══════════════════════════════════════════════════════════════
#  OutcomeReporter
# ═══════════════════════════════════════════════════════════════
class TestOutcomeReporter:
    def test_report_records_outcome(self, catalog, health: HealthMonitor) -> None:
        reporter = OutcomeReporter(catalog, health)
        record = reporter.report("p2", True, 42.0)
        assert record.total_successes == 1
        assert record.average_latency_ms == pytest.approx(42.0)

    def test_report_unknown_provider(self, catalog, health: HealthMonitor) -> None:
        reporter = OutcomeReporter(catalog, health)
        with pytest.raises(UnknownProviderError):
            reporter.report("ghost", False)
        assert health.snapshot("ghost") is None


# ═══════════════════════════════════════════════════════════════
#  RecoverySweeper
# ═══════════════════════════════════════════════════════════════
class TestRecoverySweeper:
    def test_run_once_heals(self, health: HealthMonitor, clock) -> None:
        sweeper = RecoverySweeper(health)
        _fail(health, "p1")
        clock.advance(1800)
        assert sweeper.run_once() == ["p1"]
        assert sweeper.passes == 1

    def test_run_once_skips_when_busy(self, clock) -> None:
        nested: list[list[str] | None] = []

        class ReentrantMonitor(HealthMonitor):
            def sweep_long_recovery(self, now=None):
                nested.append(sweeper.run_once(now))
                return super().sweep_long_recovery(now)

        sweeper = RecoverySweeper(ReentrantMonitor(clock=clock))
        assert sweeper.run_once() == []
        assert nested == [None]
        assert sweeper.passes == 1

    @pytest.mark.asyncio
    async def test_start_and_stop(self, health: HealthMonitor) -> None:
        sweeper = RecoverySweeper(health, interval_seconds=0.01)
        sweeper.start()
        sweeper.start()  # idempotent
        assert sweeper.running
        await asyncio.sleep(0.1)
        await sweeper.stop()
        assert not sweeper.running
        assert sweeper.passes >= 1

    @pytest.mark.asyncio
    async def test_stop_without_start(self, health: HealthMonitor) -> None:
        sweeper = RecoverySweeper(health)
        await sweeper.stop()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_background_sweep_heals_idle_provider(self, health: HealthMonitor, clock) -> None:
        _fail(health, "p1")
        clock.advance(1800)
        sweeper = RecoverySweeper(health, interval_seconds=0.01)
        sweeper.start()
        for _ in range(100):
            if health.snapshot("p1").is_healthy:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()
        assert health.snapshot("p1").is_healthy

    @pytest.mark.asyncio
    async def test_loop_survives_failed_pass(self, clock) -> None:
        calls = {"n": 0}

        class FlakyMonitor(HealthMonitor):
            def sweep_long_recovery(self, now=None):
                calls["n"] += 1
                if calls["n"] == 1:
                    raise RuntimeError("boom")
                return super().sweep_long_recovery(now)

        sweeper = RecoverySweeper(FlakyMonitor(clock=clock), interval_seconds=0.01)
        sweeper.start()
        for _ in range(100):
            if sweeper.passes >= 1:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()
        assert calls["n"] >= 2
        assert sweeper.passes >= 1


# ═══════════════════════════════════════════════════════════════
#  RoutingEngine
# ═══════════════════════════════════════════════════════════════
class TestRoutingEngine:
    def test_unknown_emergency_default_rejected(self, catalog, table) -> None:
        with pytest.raises(UnknownProviderError):
            RoutingEngine(catalog, table, emergency_default="ghost")

    def test_narration_scenario(self, engine: RoutingEngine, clock) -> None:
        assert engine.select_provider("narration") == "p1"
        for _ in range(3):
            engine.report("p1", False)
        assert engine.select_provider("narration") == "p2"

        for _ in range(3):
            engine.report("p2", False)
        assert engine.select_provider("narration") == "p3"

        clock.advance(600)
        assert engine.select_provider("narration") == "p1"

    def test_all_unhealthy_routes_to_emergency(self, engine: RoutingEngine) -> None:
        for pid in ("p1", "p2", "p3"):
            for _ in range(3):
                engine.report(pid, False)
        assert engine.select_provider("narration") == "emergency"

    def test_disabled_emergency_default_is_never_selected(self, engine: RoutingEngine) -> None:
        engine.set_provider_active("emergency", False)
        for pid in ("p1", "p2", "p3"):
            for _ in range(3):
                engine.report(pid, False)
        with pytest.raises(RoutingExhaustedError):
            engine.select_provider("narration")

    def test_get_health(self, engine: RoutingEngine) -> None:
        fresh = engine.get_health("p2")
        assert fresh.is_healthy
        assert fresh.total_successes == 0
        engine.report("p2", True, 10.0)
        assert engine.get_health("p2").total_successes == 1
        with pytest.raises(UnknownProviderError):
            engine.get_health("ghost")

    def test_get_all_health_covers_catalog(self, engine: RoutingEngine) -> None:
        ids = {r.provider_id for r in engine.get_all_health()}
        assert ids == {p.provider_id for p in engine.catalog}

    def test_reset_provider(self, engine: RoutingEngine) -> None:
        for _ in range(3):
            engine.report("p1", False)
        engine.reset_provider("p1")
        assert engine.select_provider("narration") == "p1"
        with pytest.raises(UnknownProviderError):
            engine.reset_provider("ghost")

    def test_update_feature_config(self, engine: RoutingEngine) -> None:
        engine.update_feature_config("narration", primary="p3", fallbacks=())
        assert engine.select_provider("narration") == "p3"
        assert engine.get_feature_config("narration").candidates == ("p3",)

    def test_set_provider_active(self, engine: RoutingEngine) -> None:
        engine.set_provider_active("p1", False)
        assert engine.select_provider("narration") == "p2"
        engine.set_provider_active("p1", True)
        assert engine.select_provider("narration") == "p1"

    def test_system_status(self, engine: RoutingEngine) -> None:
        for _ in range(3):
            engine.report("p1", False)
        status = engine.get_system_status()

        assert status.total_providers == 6
        assert status.unhealthy_count == 1
        assert status.healthy_count == 5
        assert status.by_category == {
            ProviderCategory.SPEECH_SYNTHESIS.value: 3,
            ProviderCategory.TEXT_GENERATION.value: 3,
        }
        assert status.by_cost_bucket == {
            CostBucket.FREE.value: 2,
            CostBucket.LOW.value: 1,
            CostBucket.MEDIUM.value: 1,
            CostBucket.HIGH.value: 2,
        }
        assert status.by_vendor == {
            "elevenlabs": 1,
            "openai": 2,
            "browser": 1,
            "groq": 1,
            "deepseek": 1,
        }
        assert status.avg_cost_by_vendor["openai"] == pytest.approx(0.0085)

    def test_status_does_not_apply_recovery(self, engine: RoutingEngine, clock) -> None:
        for _ in range(3):
            engine.report("p1", False)
        clock.advance(3600)
        assert engine.get_system_status().unhealthy_count == 1
        assert engine.health.snapshot("p1").is_healthy is False

    def test_from_settings(self, catalog, table, clock) -> None:
        settings = get_settings(
            failure_threshold=1,
            emergency_default_provider="emergency",
        )
        engine = RoutingEngine.from_settings(settings, catalog, table, clock=clock)
        assert engine.health.failure_threshold == 1
        engine.report("p1", False)
        assert engine.select_provider("narration") == "p2"

    @pytest.mark.asyncio
    async def test_async_context_manager(self, engine: RoutingEngine) -> None:
        async with engine:
            assert engine.sweeper.running
        assert not engine.sweeper.running
