"""
monitor.py - Stability Monitor

Long-running supervised session: periodic checkpoints and resource samples,
an embedded performance benchmark, error recording with threshold-based
abort, and recovery dispatch.

State machine:
    not_started -> running -> completed | failed

Leaving ``running`` cancels every timer in the same synchronous call, so no
checkpoint, sample, error or recovery can be recorded on a stopped session.

Resource samples take ``frame_rate`` from the embedded benchmark's most
recent frame-rate sample (one per completed one-second window), so it is
None until the first window closes. Frames are counted with
``record_frame()``.

Usage:
    monitor = StabilityMonitor(probes=HostProbes.from_psutil())
    monitor.start("Overnight Soak", {"duration_ms": 8 * 3600 * 1000})
    ...
    monitor.record_error("ScreenDetectionFailed", "no lanes found")
    session = await monitor.wait()
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from soakbench.benchmark import PerformanceBenchmark
from soakbench.config.logging import get_logger
from soakbench.core.errors import HarnessStateError
from soakbench.core.options import StabilityOptions, merge_options
from soakbench.core.timers import Deadline, PeriodicTask, require_running_loop
from soakbench.core.types import (
    Checkpoint,
    ErrorEvent,
    RecoveryEvent,
    ResourceSample,
    SessionState,
    StabilitySession,
    StabilityStatus,
    elapsed_ms,
    utc_now,
)
from soakbench.probes import HostProbes, process_memory_info, safe_probe
from soakbench.runner.race import describe_error

from .recovery import RecoveryDispatcher

logger = get_logger("soakbench.stability")

ON_START_ERROR = "TestFunctionError"


class StabilityMonitor:
    """Supervises one stability session at a time."""

    def __init__(
        self,
        probes: HostProbes | None = None,
        recovery: RecoveryDispatcher | None = None,
        benchmark_factory: Callable[[], PerformanceBenchmark] | None = None,
        *,
        defaults: StabilityOptions | None = None,
    ):
        self.probes = probes or HostProbes()
        self.recovery = recovery or RecoveryDispatcher()
        self.defaults = defaults or StabilityOptions()
        self._benchmark_factory = benchmark_factory or (lambda: PerformanceBenchmark(self.probes))

        self._session = StabilitySession()
        self._benchmark: PerformanceBenchmark | None = None
        self._timers: list[PeriodicTask] = []
        self._deadline: Deadline | None = None
        self._background: set[asyncio.Task] = set()
        self._done: asyncio.Event | None = None
        self._started_at = 0.0

    @property
    def session(self) -> StabilitySession:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._session.running

    @property
    def benchmark(self) -> PerformanceBenchmark | None:
        return self._benchmark

    # -- lifecycle ----------------------------------------------------------

    def start(
        self,
        name: str | None = None,
        options: StabilityOptions | Mapping[str, Any] | None = None,
        on_start: Callable[[], Any] | None = None,
    ) -> bool:
        """Start a new session. Returns False if one is already running."""
        if self.is_running:
            logger.warning("Stability test already running; stop it first", name=self._session.name)
            return False

        merged = merge_options(StabilityOptions, self.defaults, options, source="stability options")
        require_running_loop("StabilityMonitor")

        self._session = StabilitySession(
            name=name or "Unnamed Stability Test",
            options=merged,
            state=SessionState.RUNNING,
            start_time=utc_now(),
            target_duration_ms=merged.duration_ms,
        )
        self._done = asyncio.Event()
        self._started_at = time.monotonic()

        self._timers = [
            PeriodicTask(
                "stability-checkpoints", merged.checkpoint_interval_ms / 1000, self.record_checkpoint
            ),
            PeriodicTask(
                "stability-resources",
                merged.resource_sample_interval_ms / 1000,
                self.sample_resources,
            ),
        ]
        for timer in self._timers:
            timer.start()

        self._benchmark = self._benchmark_factory()
        if not self._benchmark.start(
            f"{self._session.name} - Performance",
            {"sample_interval_ms": merged.resource_sample_interval_ms / 2},
        ):
            logger.warning("Embedded benchmark did not start", name=self._session.name)

        logger.info(
            "Stability test started",
            name=self._session.name,
            target_minutes=round(merged.duration_ms / 60000, 2),
        )

        if on_start is not None:
            self._run_on_start(on_start)

        if self.is_running:
            self._deadline = Deadline("stability-duration", merged.duration_ms / 1000, self._duration_elapsed)
            self._deadline.start()
        return True

    def _run_on_start(self, on_start: Callable[[], Any]) -> None:
        try:
            result = on_start()
        except Exception as e:
            self.record_error(ON_START_ERROR, describe_error(e))
            return
        if inspect.isawaitable(result):
            self._track(self._await_on_start(result))

    async def _await_on_start(self, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except Exception as e:
            self.record_error(ON_START_ERROR, describe_error(e))

    def _duration_elapsed(self) -> None:
        self._deadline = None
        if self.is_running:
            logger.info("Stability duration reached", name=self._session.name)
            self.stop(True)

    def stop(self, successful: bool = True) -> StabilitySession | None:
        """End the session as completed or failed. No-op when not running."""
        if not self.is_running:
            logger.info("No stability test running")
            return None

        session = self._session
        session.state = SessionState.COMPLETED if successful else SessionState.FAILED

        for timer in self._timers:
            timer.cancel()
        self._timers = []
        if self._deadline is not None:
            self._deadline.cancel()
            self._deadline = None
        for task in list(self._background):
            task.cancel()

        if self._benchmark is not None:
            session.performance_benchmark = self._benchmark.stop()

        session.end_time = utc_now()
        session.duration_ms = elapsed_ms(session.start_time, session.end_time)
        if self._done is not None:
            self._done.set()

        log = logger.info if successful else logger.warning
        log(
            "Stability test completed" if successful else "Stability test failed",
            name=session.name,
            duration_s=round(session.duration_ms / 1000, 3),
            errors=len(session.errors),
            recoveries=len(session.recoveries),
        )
        return session

    async def wait(self) -> StabilitySession:
        """Wait until the current session reaches a terminal state."""
        if self._done is None:
            raise HarnessStateError("No stability session has been started")
        await self._done.wait()
        return self._session

    def status(self) -> StabilityStatus:
        session = self._session
        if session.running:
            duration = (time.monotonic() - self._started_at) * 1000
        else:
            duration = session.duration_ms
        return StabilityStatus(
            running=session.running,
            name=session.name if session.state != SessionState.NOT_STARTED else None,
            start_time=session.start_time,
            duration_ms=duration,
            errors=len(session.errors),
            recoveries=len(session.recoveries),
            state=session.state,
        )

    # -- periodic activities -------------------------------------------------

    def record_checkpoint(self) -> Checkpoint | None:
        if not self.is_running:
            return None
        session = self._session
        memory = None
        if session.options.checkpoint_memory:
            memory = safe_probe("process_memory", process_memory_info, None)
        checkpoint = Checkpoint(
            elapsed_ms=(time.monotonic() - self._started_at) * 1000,
            errors=len(session.errors),
            recoveries=len(session.recoveries),
            memory_usage=memory,
        )
        session.checkpoints.append(checkpoint)
        logger.info(
            "Checkpoint recorded",
            name=session.name,
            elapsed_s=round(checkpoint.elapsed_ms / 1000, 1),
            errors=checkpoint.errors,
        )
        return checkpoint

    def sample_resources(self) -> ResourceSample | None:
        """Snapshot probe readings; metrics without a probe are None."""
        if not self.is_running:
            return None
        sample = ResourceSample(
            cpu_usage=self.probes.read_cpu(),
            memory_usage=self.probes.read_memory() if self.probes.memory_info is not None else None,
            frame_rate=self._benchmark.last_frame_rate if self._benchmark is not None else None,
        )
        self._session.resource_usage.append(sample)
        return sample

    # -- errors & recovery ----------------------------------------------------

    def record_error(
        self,
        error_type: str | None = None,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> ErrorEvent | None:
        """Record an error; abort on threshold breach, otherwise try to recover."""
        if not self.is_running:
            return None

        session = self._session
        event = ErrorEvent(
            type=error_type or "Unknown",
            message=message or "No message",
            data=data or {},
        )
        session.errors.append(event)
        session.consecutive_error_count += 1
        logger.warning("Error recorded", type=event.type, message=event.message)

        options = session.options
        if len(session.errors) >= options.max_errors:
            logger.warning("Maximum number of errors reached", errors=len(session.errors))
            self.stop(False)
            return event
        if session.consecutive_error_count >= options.max_consecutive_errors:
            logger.warning(
                "Maximum consecutive errors reached", errors=session.consecutive_error_count
            )
            self.stop(False)
            return event

        self.attempt_recovery(event)
        return event

    def attempt_recovery(self, error: ErrorEvent) -> RecoveryEvent | None:
        """Dispatch the error's strategy.

        Synchronous strategies are recorded immediately and their event is
        returned. Awaitable strategies run on a tracked task bounded by
        ``recovery_timeout_ms``; their event is recorded when they settle.
        """
        if not self.is_running:
            return None

        strategy = self.recovery.strategy_for(error.type)
        logger.info("Attempting recovery", type=error.type, action=strategy.action)
        try:
            result = strategy.recover(error)
        except Exception as e:
            logger.warning("Recovery strategy raised", action=strategy.action, error=describe_error(e))
            return self._finish_recovery(error, strategy.action, False)

        if inspect.isawaitable(result):
            self._track(self._await_recovery(error, strategy.action, result))
            return None
        return self._finish_recovery(error, strategy.action, bool(result))

    async def _await_recovery(self, error: ErrorEvent, action: str, pending: Awaitable[Any]) -> None:
        timeout_s = self._session.options.recovery_timeout_ms / 1000
        try:
            success = bool(await asyncio.wait_for(pending, timeout=timeout_s))
        except asyncio.TimeoutError:
            logger.warning("Recovery timed out", action=action, timeout_s=timeout_s)
            success = False
        except Exception as e:
            logger.warning("Recovery strategy failed", action=action, error=describe_error(e))
            success = False
        self._finish_recovery(error, action, success)

    def _finish_recovery(self, error: ErrorEvent, action: str, success: bool) -> RecoveryEvent | None:
        if not self.is_running:
            return None
        event = RecoveryEvent(error_type=error.type, action=action, success=success)
        self._session.recoveries.append(event)
        if success:
            self._session.consecutive_error_count = 0
            logger.info("Recovery successful", action=action)
        else:
            logger.warning("Recovery failed", action=action)
        return event

    def _track(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # -- forwarding to the embedded benchmark -------------------------------

    def record_frame(self) -> None:
        if self.is_running and self._benchmark is not None:
            self._benchmark.record_frame()

    def record_response_time(self, action_type: str, response_time_ms: float) -> None:
        if self.is_running and self._benchmark is not None:
            self._benchmark.record_response_time(action_type, response_time_ms)


__all__ = ["ON_START_ERROR", "StabilityMonitor"]
