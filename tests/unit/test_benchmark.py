"""Tests for PerformanceBenchmark."""

from __future__ import annotations

import asyncio
import json

import pytest

from soakbench.benchmark import PerformanceBenchmark
from soakbench.core.errors import ConfigurationError, HarnessStateError
from soakbench.core.types import BenchmarkState
from soakbench.probes import HostProbes

# Long enough that the background sampler never fires during a test.
IDLE = {"sample_interval_ms": 60_000}


def _memory():
    return {"total": 100.0, "free": 40.0, "used": 60.0}


@pytest.mark.asyncio
async def test_start_twice_is_rejected():
    bench = PerformanceBenchmark()
    assert bench.start("first", IDLE) is True
    first = bench.current

    assert bench.start("second", IDLE) is False
    assert bench.current is first
    assert bench.current.name == "first"
    bench.stop()


def test_stop_when_idle_returns_none():
    assert PerformanceBenchmark().stop() is None


@pytest.mark.asyncio
async def test_sampling_collects_probe_values():
    probes = HostProbes(cpu_usage=lambda: 42.0, memory_info=_memory)
    bench = PerformanceBenchmark(probes)
    bench.start("sampled", {"sample_interval_ms": 10})

    await asyncio.sleep(0.06)
    run = bench.stop()

    assert run.state == BenchmarkState.STOPPED
    assert len(run.cpu_usage) >= 2
    assert all(s.value == 42.0 for s in run.cpu_usage)
    assert run.memory_usage and run.memory_usage[0].value.used == 60.0
    assert run.summary.cpu_usage.avg == 42.0
    assert run.summary.memory_usage.avg == 60.0
    assert run.duration_ms > 0


@pytest.mark.asyncio
async def test_no_samples_after_stop():
    bench = PerformanceBenchmark(HostProbes(cpu_usage=lambda: 1.0))
    bench.start("short", {"sample_interval_ms": 10})
    await asyncio.sleep(0.03)
    run = bench.stop()
    count = len(run.cpu_usage)

    await asyncio.sleep(0.05)
    bench.record_frame()
    bench.record_response_time("tap", 5.0)

    assert len(run.cpu_usage) == count
    assert run.response_times == []


@pytest.mark.asyncio
async def test_response_time_statistics_by_action():
    bench = PerformanceBenchmark()
    bench.start("actions", IDLE)
    for value in (10, 20, 30):
        bench.record_response_time("swipe", value)
    bench.record_response_time("tap", 5)
    run = bench.stop()

    swipe = run.summary.response_times["swipe"]
    assert (swipe.min, swipe.max, swipe.avg, swipe.median) == (10, 30, 20, 20)
    assert run.summary.response_times["tap"].avg == 5


@pytest.mark.asyncio
async def test_response_time_tracking_disabled():
    bench = PerformanceBenchmark()
    bench.start("quiet", {**IDLE, "response_time_tracking_enabled": False})
    bench.record_response_time("swipe", 10)
    run = bench.stop()

    assert run.response_times == []
    assert run.summary.response_times == {}


@pytest.mark.asyncio
async def test_frame_rate_uses_a_full_window(clock):
    bench = PerformanceBenchmark(HostProbes(cpu_usage=lambda: 0.0), clock=clock)
    bench.start("frames", IDLE)

    for _ in range(30):
        bench.record_frame()
    clock.advance(0.5)
    bench._take_sample()
    assert bench.current.frame_rates == []
    assert bench.last_frame_rate is None

    clock.advance(0.5)
    bench._take_sample()
    assert bench.last_frame_rate == pytest.approx(30.0)

    # Counter resets with the window.
    for _ in range(10):
        bench.record_frame()
    clock.advance(2.0)
    bench._take_sample()
    assert bench.last_frame_rate == pytest.approx(5.0)
    bench.stop()


@pytest.mark.asyncio
async def test_cpu_heuristic_without_probe(clock):
    bench = PerformanceBenchmark(clock=clock)
    bench.start("heuristic", {"sample_interval_ms": 60_000, "memory_tracking_enabled": False})

    clock.advance(15.0)
    bench._take_sample()
    clock.advance(60.0)
    bench._take_sample()
    run = bench.stop()

    assert [s.value for s in run.cpu_usage] == [pytest.approx(25.0), pytest.approx(100.0)]


@pytest.mark.asyncio
async def test_failing_cpu_probe_drops_the_sample():
    def broken():
        raise RuntimeError("no cpu")

    bench = PerformanceBenchmark(HostProbes(cpu_usage=broken, memory_info=_memory))
    bench.start("broken", IDLE)
    bench._take_sample()
    run = bench.stop()

    assert run.cpu_usage == []
    assert len(run.memory_usage) == 1
    assert run.summary.cpu_usage.avg == 0.0


@pytest.mark.asyncio
async def test_memory_tracking_disabled():
    bench = PerformanceBenchmark(HostProbes(cpu_usage=lambda: 1.0, memory_info=_memory))
    bench.start("no-memory", {**IDLE, "memory_tracking_enabled": False})
    bench._take_sample()
    run = bench.stop()

    assert run.memory_usage == []
    assert run.summary.memory_usage is None


@pytest.mark.asyncio
async def test_invalid_options_raise_configuration_error():
    bench = PerformanceBenchmark()
    with pytest.raises(ConfigurationError):
        bench.start("bad", {"sample_interval_ms": -5})
    assert not bench.is_running


@pytest.mark.asyncio
async def test_defaults_are_not_mutated_by_start_options():
    bench = PerformanceBenchmark()
    bench.start("custom", {**IDLE, "report_format": "text"})
    bench.stop()

    assert bench.defaults.sample_interval_ms == 1000
    assert bench.defaults.report_format == "json"


def test_start_requires_a_running_loop():
    with pytest.raises(HarnessStateError):
        PerformanceBenchmark().start("no-loop")


@pytest.mark.asyncio
async def test_render_formats():
    bench = PerformanceBenchmark(HostProbes(cpu_usage=lambda: 12.5))
    bench.start("Rendered", IDLE)
    bench._take_sample()
    bench.record_response_time("tap", 4.0)
    bench.stop()

    text = bench.render("text")
    assert "=== Performance Benchmark Report: Rendered ===" in text
    assert "CPU Usage: Min: 12.50%" in text
    assert "tap: Min: 4.00ms" in text

    data = json.loads(bench.render())
    assert data["name"] == "Rendered"
    assert data["state"] == "stopped"
