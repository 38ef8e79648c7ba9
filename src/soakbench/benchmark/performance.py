"""
performance.py - Performance Benchmark

Periodic sampling of CPU, memory and frame rate into time series, plus
per-action response times. One run may be active per instance.

Usage:
    bench = PerformanceBenchmark(probes=HostProbes.from_psutil())
    bench.start("Vision Processing", {"sample_interval_ms": 500})
    for frame in frames:
        process(frame)
        bench.record_frame()
    bench.record_response_time("swipe", 42.0)
    run = bench.stop()
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any

from soakbench.config.logging import get_logger
from soakbench.core.options import BenchmarkOptions, merge_options
from soakbench.core.statistics import calculate_statistics, series_statistics
from soakbench.core.timers import PeriodicTask, require_running_loop
from soakbench.core.types import (
    BenchmarkRun,
    BenchmarkState,
    BenchmarkSummary,
    MemorySample,
    ResponseTimeSample,
    Sample,
    elapsed_ms,
    utc_now,
)
from soakbench.probes import HostProbes, process_cpu_percent, safe_probe
from soakbench.reporters import JSONReporter, TextReporter

logger = get_logger("soakbench.benchmark")

# Frame rate is computed once per full window, independent of the sample interval.
FRAME_WINDOW_S = 1.0


def summarize(run: BenchmarkRun) -> BenchmarkSummary:
    """Statistics over the CPU, frame-rate, response-time and memory series."""
    by_action: dict[str, list[float]] = defaultdict(list)
    for sample in run.response_times:
        by_action[sample.action_type].append(sample.value)

    memory = None
    if run.memory_usage:
        memory = calculate_statistics(s.value.used or 0 for s in run.memory_usage)

    return BenchmarkSummary(
        cpu_usage=series_statistics(run.cpu_usage),
        frame_rate=series_statistics(run.frame_rates),
        response_times={action: calculate_statistics(v) for action, v in by_action.items()},
        memory_usage=memory,
    )


class PerformanceBenchmark:
    """Start/stop lifecycle around a periodic metric sampler."""

    def __init__(
        self,
        probes: HostProbes | None = None,
        defaults: BenchmarkOptions | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.probes = probes or HostProbes()
        self.defaults = defaults or BenchmarkOptions()
        self._clock = clock
        self._run = BenchmarkRun(options=self.defaults)
        self._sampler: PeriodicTask | None = None
        self._frame_count = 0
        self._window_start = 0.0

    @property
    def is_running(self) -> bool:
        return self._run.state == BenchmarkState.RUNNING

    @property
    def current(self) -> BenchmarkRun:
        """The live (or last) run record. Read-only by convention."""
        return self._run

    @property
    def last_frame_rate(self) -> float | None:
        frames = self._run.frame_rates
        return frames[-1].value if frames else None

    def start(
        self,
        name: str | None = None,
        options: BenchmarkOptions | Mapping[str, Any] | None = None,
    ) -> bool:
        """Begin a run. Returns False if one is already running."""
        if self.is_running:
            logger.warning("Benchmark already running; stop it first", name=self._run.name)
            return False

        merged = merge_options(BenchmarkOptions, self.defaults, options, source="benchmark options")
        require_running_loop("PerformanceBenchmark")

        self._run = BenchmarkRun(
            name=name or "Unnamed Benchmark",
            options=merged,
            state=BenchmarkState.RUNNING,
            start_time=utc_now(),
        )
        self._frame_count = 0
        self._window_start = self._clock()
        if merged.cpu_sampling_method == "detailed" and self.probes.cpu_usage is None:
            # psutil reports 0.0 on the first call; prime it.
            safe_probe("process_cpu", process_cpu_percent, 0.0)

        self._sampler = PeriodicTask(
            "benchmark-sampler", merged.sample_interval_ms / 1000, self._take_sample
        )
        self._sampler.start()
        logger.info(
            "Benchmark started",
            name=self._run.name,
            interval_ms=merged.sample_interval_ms,
        )
        return True

    def stop(self) -> BenchmarkRun | None:
        """End the run and return its record, or None if nothing was running."""
        if not self.is_running:
            logger.info("No benchmark running")
            return None

        if self._sampler is not None:
            self._sampler.cancel()
            self._sampler = None

        run = self._run
        run.state = BenchmarkState.STOPPED
        run.end_time = utc_now()
        run.duration_ms = elapsed_ms(run.start_time, run.end_time)
        run.summary = summarize(run)
        logger.info(
            "Benchmark completed",
            name=run.name,
            duration_s=round(run.duration_ms / 1000, 3),
            samples=len(run.cpu_usage),
        )
        return run

    def record_frame(self) -> None:
        """Count one processed frame."""
        if not self.is_running:
            return
        self._frame_count += 1

    def record_response_time(self, action_type: str, response_time_ms: float) -> None:
        if not self.is_running or not self._run.options.response_time_tracking_enabled:
            return
        self._run.response_times.append(
            ResponseTimeSample(action_type=action_type, value=response_time_ms)
        )

    # -- sampling -----------------------------------------------------------

    def _take_sample(self) -> None:
        if not self.is_running:
            return
        options = self._run.options

        self._sample_cpu(options)
        if options.memory_tracking_enabled:
            self._sample_memory()
        if options.frame_rate_tracking_enabled:
            self._update_frame_rate()

    def _sample_cpu(self, options: BenchmarkOptions) -> None:
        if self.probes.cpu_usage is not None:
            value = self.probes.read_cpu()
        elif options.cpu_sampling_method == "detailed":
            value = safe_probe("process_cpu", process_cpu_percent, None)
        else:
            interval_ms = options.sample_interval_ms
            since_window_ms = (self._clock() - self._window_start) * 1000
            value = min(since_window_ms, interval_ms) / interval_ms * 100

        if value is None:
            return
        self._run.cpu_usage.append(Sample(value=value))

    def _sample_memory(self) -> None:
        info = self.probes.read_memory()
        if info is None:
            return
        self._run.memory_usage.append(MemorySample(value=info))

    def _update_frame_rate(self) -> None:
        now = self._clock()
        elapsed_s = now - self._window_start
        if elapsed_s < FRAME_WINDOW_S:
            return
        self._run.frame_rates.append(Sample(value=self._frame_count / elapsed_s))
        self._frame_count = 0
        self._window_start = now

    # -- reporting ----------------------------------------------------------

    def render(self, report_format: str | None = None) -> str:
        """Render the current run as JSON or narrative text."""
        fmt = report_format or self._run.options.report_format
        reporter = JSONReporter() if fmt == "json" else TextReporter()
        return reporter.render(self._run)


__all__ = ["FRAME_WINDOW_S", "PerformanceBenchmark", "summarize"]
