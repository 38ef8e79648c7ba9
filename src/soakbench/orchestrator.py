"""
orchestrator.py - Test Orchestrator

Runs the enabled components of a RunConfig and merges their records into a
ConsolidatedReport:

    unit / integration   CaseRunner over the registered suite definers
    performance          one PerformanceBenchmark per scenario, in order
    stability            one StabilityMonitor session, awaited to completion
    compatibility        one CompatibilityProber run

Components run concurrently and are contained: an unexpected exception in
one is logged and recorded under ``report.errors`` while the others finish.

Usage:
    orchestrator = TestOrchestrator(RunConfig(run_stability=False))
    orchestrator.add_unit_suites(define_unit_suites)
    report = await orchestrator.run_all()
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, TypeVar

from soakbench.benchmark import PerformanceBenchmark
from soakbench.compat import CompatibilityProber
from soakbench.config.logging import get_logger
from soakbench.core.options import RunConfig
from soakbench.core.types import (
    BenchmarkRun,
    CompatibilityReport,
    ConsolidatedReport,
    RunResult,
    StabilitySession,
    elapsed_ms,
    utc_now,
)
from soakbench.probes import HostProbes
from soakbench.reporters import FileReportSink
from soakbench.runner import CaseRunner
from soakbench.stability import RecoveryDispatcher, StabilityMonitor

logger = get_logger("soakbench.orchestrator")

SuiteDefiner = Callable[[CaseRunner], None]

T = TypeVar("T")


class TestOrchestrator:
    """Top-level coordinator for one orchestrated run."""

    __test__: ClassVar[bool] = False

    def __init__(
        self,
        config: RunConfig | None = None,
        probes: HostProbes | None = None,
        sink: FileReportSink | None = None,
        *,
        recovery: RecoveryDispatcher | None = None,
        stability_on_start: Callable[[], Any] | None = None,
    ):
        self.config = config or RunConfig()
        self.probes = probes or HostProbes()
        if sink is None and self.config.generate_reports:
            sink = FileReportSink(self.config.report_path)
        self.sink = sink
        self.recovery = recovery
        self.stability_on_start = stability_on_start
        self._unit_definers: list[SuiteDefiner] = []
        self._integration_definers: list[SuiteDefiner] = []

    def add_unit_suites(self, definer: SuiteDefiner) -> None:
        self._unit_definers.append(definer)

    def add_integration_suites(self, definer: SuiteDefiner) -> None:
        self._integration_definers.append(definer)

    # -- components ------------------------------------------------------------

    def _runner(self, layer: str) -> CaseRunner:
        config = self.config
        return CaseRunner(
            timeout_ms=config.per_case_timeout_ms,
            settle=config.settle_mode,
            grace_period_s=config.grace_period_ms / 1000,
            cancel_on_timeout=config.cancel_on_timeout,
            layer=layer,
        )

    async def _run_layer(self, layer: str, definers: list[SuiteDefiner]) -> RunResult:
        logger.info("Running test layer", layer=layer, definers=len(definers))
        runner = self._runner(layer)
        for define in definers:
            define(runner)
        return await runner.run()

    async def run_unit(self) -> RunResult:
        return await self._run_layer("unit", self._unit_definers)

    async def run_integration(self) -> RunResult:
        return await self._run_layer("integration", self._integration_definers)

    async def run_performance(self) -> list[BenchmarkRun]:
        runs: list[BenchmarkRun] = []
        for scenario in self.config.performance_scenarios:
            bench = PerformanceBenchmark(self.probes, self.config.benchmark_defaults)
            logger.info("Running benchmark scenario", name=scenario.name, duration_ms=scenario.duration_ms)
            if not bench.start(scenario.name, scenario.options):
                continue
            await asyncio.sleep(scenario.duration_ms / 1000)
            run = bench.stop()
            if run is not None:
                runs.append(run)
        return runs

    async def run_stability(self) -> StabilitySession:
        scenario = self.config.stability_scenario
        monitor = StabilityMonitor(self.probes, recovery=self.recovery)
        monitor.start(scenario.name, scenario.options, on_start=self.stability_on_start)
        return await monitor.wait()

    async def run_compatibility(self) -> CompatibilityReport:
        return CompatibilityProber(self.config.compatibility, self.probes).run()

    # -- full run ----------------------------------------------------------------

    async def _contained(
        self,
        name: str,
        job: Callable[[], Awaitable[T]],
        errors: dict[str, str],
    ) -> T | None:
        try:
            return await job()
        except Exception as e:
            logger.error("Component failed", component=name, error=str(e), exc_info=True)
            errors[name] = f"{type(e).__name__}: {e}"
            return None

    async def run_all(self) -> ConsolidatedReport:
        """Run every enabled component and build the consolidated report."""
        config = self.config
        report = ConsolidatedReport(started_at=utc_now())

        jobs: dict[str, Callable[[], Awaitable[Any]]] = {}
        if config.run_unit:
            jobs["unit"] = self.run_unit
        if config.run_integration:
            jobs["integration"] = self.run_integration
        if config.run_performance:
            jobs["performance"] = self.run_performance
        if config.run_stability:
            jobs["stability"] = self.run_stability
        if config.run_compatibility:
            jobs["compatibility"] = self.run_compatibility

        logger.info("Starting test run", components=list(jobs))
        results = await asyncio.gather(
            *(self._contained(name, job, report.errors) for name, job in jobs.items())
        )
        outcome = dict(zip(jobs, results))

        report.unit = outcome.get("unit")
        report.integration = outcome.get("integration")
        report.performance = outcome.get("performance") or []
        report.stability = outcome.get("stability")
        report.compatibility = outcome.get("compatibility")
        report.ended_at = utc_now()
        report.duration_ms = elapsed_ms(report.started_at, report.ended_at)

        logger.info(
            "Test run completed",
            duration_s=round(report.duration_ms / 1000, 3),
            component_errors=len(report.errors),
        )

        if config.generate_reports and self.sink is not None:
            self.sink.save(report)
        return report


__all__ = ["SuiteDefiner", "TestOrchestrator"]
