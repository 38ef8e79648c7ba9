"""Shared fixtures for soakbench tests."""

from __future__ import annotations

import pytest

from soakbench.config.logging import configure_logging
from soakbench.config.settings import CONFIG_ENV_VAR
from soakbench.probes import HostProbes


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    """Route logs to the current stderr and ignore any ambient settings file."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    configure_logging(level="WARNING", colors=False, force=True)
    yield


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def compatible_probes() -> HostProbes:
    """Probes reporting a supported target and every feature available."""
    return HostProbes(
        target_app_version=lambda: "7.2.0",
        host_runtime_version=lambda: "3.12.1",
        feature_available=lambda name: True,
    )
