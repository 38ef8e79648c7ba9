"""Tests for PeriodicTask and Deadline."""

from __future__ import annotations

import asyncio

import pytest

from soakbench.core.errors import HarnessStateError
from soakbench.core.timers import Deadline, PeriodicTask, require_running_loop


@pytest.mark.asyncio
async def test_periodic_task_ticks_until_cancelled():
    ticks = []
    task = PeriodicTask("ticker", 0.01, lambda: ticks.append(1))
    task.start()
    assert task.active

    await asyncio.sleep(0.08)
    task.cancel()
    seen = len(ticks)
    assert seen >= 2
    assert not task.active

    await asyncio.sleep(0.05)
    assert len(ticks) == seen


@pytest.mark.asyncio
async def test_periodic_task_survives_callback_errors():
    calls = []

    def flaky():
        calls.append(1)
        raise RuntimeError("probe down")

    task = PeriodicTask("flaky", 0.01, flaky)
    task.start()
    await asyncio.sleep(0.06)
    task.cancel()
    assert len(calls) >= 2


@pytest.mark.asyncio
async def test_deadline_fires_once_and_can_be_cancelled():
    fired = []
    deadline = Deadline("once", 0.01, lambda: fired.append("a"))
    deadline.start()
    assert deadline.pending
    await asyncio.sleep(0.05)
    assert fired == ["a"]
    assert not deadline.pending

    cancelled = Deadline("never", 0.01, lambda: fired.append("b"))
    cancelled.start()
    cancelled.cancel()
    await asyncio.sleep(0.05)
    assert fired == ["a"]


def test_start_without_running_loop_raises():
    with pytest.raises(HarnessStateError):
        PeriodicTask("orphan", 1.0, lambda: None).start()
    with pytest.raises(HarnessStateError, match="Benchmark"):
        require_running_loop("Benchmark")
