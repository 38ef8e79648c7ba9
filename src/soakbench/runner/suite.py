"""
suite.py - Case/Suite Runner

Cases are registered on explicit suite builders and raced against their
deadlines on the running event loop.

Usage:
    runner = CaseRunner(timeout_ms=5000)
    utils = runner.describe("Utils")
    utils.it("creates directory", test_create_directory)
    utils.skip("needs device", test_device_only)
    result = await runner.run()

Settle modes:
    JOIN   run() awaits every outstanding case; the result is complete.
    GRACE  run() returns after ``grace_period_s``; cases still pending then
           append their outcomes to the same RunResult when they settle.

With ``eager=True`` a case starts as soon as ``it()`` is called and
``run()`` only settles.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import ClassVar

from soakbench.config.logging import get_logger
from soakbench.core.options import SettleMode
from soakbench.core.timers import require_running_loop
from soakbench.core.types import OutcomeStatus, RunResult, TestOutcome, utc_now

from .race import TestFunction, race

logger = get_logger("soakbench.runner")


@dataclass
class TestCase:
    """One registered case; keeps the first outcome recorded for it."""

    __test__: ClassVar[bool] = False

    suite: str
    name: str
    fn: TestFunction | None
    timeout_ms: float
    skipped: bool = False
    started: bool = False
    outcome: TestOutcome | None = field(default=None, repr=False)

    @property
    def settled(self) -> bool:
        return self.outcome is not None


class SuiteBuilder:
    """Registers cases under one suite name. Builders do not nest."""

    def __init__(self, runner: CaseRunner, name: str):
        self._runner = runner
        self.name = name

    def it(self, name: str, fn: TestFunction, *, timeout_ms: float | None = None) -> TestCase:
        """Register a case; ``timeout_ms`` overrides the runner default."""
        case = TestCase(
            suite=self.name,
            name=name,
            fn=fn,
            timeout_ms=timeout_ms if timeout_ms is not None else self._runner.timeout_ms,
        )
        return self._runner._register(case)

    def skip(self, name: str, fn: TestFunction | None = None) -> TestCase:
        """Register a case that is recorded as skipped; ``fn`` is never called."""
        case = TestCase(
            suite=self.name,
            name=name,
            fn=fn,
            timeout_ms=self._runner.timeout_ms,
            skipped=True,
        )
        return self._runner._register(case)


class CaseRunner:
    """Executes registered cases with per-case timeouts and tallies outcomes."""

    def __init__(
        self,
        timeout_ms: float = 5000,
        *,
        eager: bool = False,
        settle: SettleMode = SettleMode.JOIN,
        grace_period_s: float = 1.0,
        cancel_on_timeout: bool = False,
        layer: str = "unit",
    ):
        self.timeout_ms = timeout_ms
        self.eager = eager
        self.settle = SettleMode(settle)
        self.grace_period_s = grace_period_s
        self.cancel_on_timeout = cancel_on_timeout
        self.layer = layer
        self.result = RunResult(layer=layer)
        self._cases: list[TestCase] = []
        self._pending: set[asyncio.Task] = set()

    @property
    def cases(self) -> list[TestCase]:
        return list(self._cases)

    @property
    def pending(self) -> int:
        """Number of cases started but not yet settled."""
        return len(self._pending)

    def describe(self, name: str) -> SuiteBuilder:
        return SuiteBuilder(self, name)

    def _register(self, case: TestCase) -> TestCase:
        self._cases.append(case)
        if self.eager:
            self._start(case)
        return case

    def _start(self, case: TestCase) -> None:
        case.started = True
        if self.result.started_at is None:
            self.result.started_at = utc_now()

        if case.skipped:
            self._record(case, OutcomeStatus.SKIPPED)
            return

        loop = require_running_loop("CaseRunner")
        task = loop.create_task(self._execute(case), name=f"case:{case.suite}:{case.name}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _execute(self, case: TestCase) -> None:
        started = time.perf_counter()
        error = await race(case.fn, case.timeout_ms, cancel_on_timeout=self.cancel_on_timeout)
        duration_ms = (time.perf_counter() - started) * 1000
        status = OutcomeStatus.PASSED if error is None else OutcomeStatus.FAILED
        self._record(case, status, error, duration_ms)

    def _record(
        self,
        case: TestCase,
        status: OutcomeStatus,
        error: str | None = None,
        duration_ms: float = 0.0,
    ) -> None:
        if case.settled:
            return
        outcome = TestOutcome(
            suite=case.suite,
            name=case.name,
            status=status,
            error=error,
            duration_ms=duration_ms,
        )
        case.outcome = outcome
        self.result.record(outcome)

        if status == OutcomeStatus.PASSED:
            logger.info("✓ PASS", suite=case.suite, case=case.name, duration_ms=round(duration_ms, 1))
        elif status == OutcomeStatus.FAILED:
            logger.warning("✗ FAIL", suite=case.suite, case=case.name, error=error)
        else:
            logger.info("SKIP", suite=case.suite, case=case.name)

    async def run(self) -> RunResult:
        """Start every registered case that has not started, then settle."""
        for case in self._cases:
            if not case.started:
                self._start(case)
        if self.result.started_at is None:
            self.result.started_at = utc_now()

        if self.settle == SettleMode.JOIN:
            while self._pending:
                await asyncio.gather(*list(self._pending))
        else:
            await asyncio.sleep(self.grace_period_s)

        self.result.ended_at = utc_now()
        logger.info(
            "Run settled",
            layer=self.layer,
            settle=self.settle.value,
            still_pending=len(self._pending),
            **self.result.counts(),
        )
        return self.result


__all__ = ["CaseRunner", "SuiteBuilder", "TestCase"]
