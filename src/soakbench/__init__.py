"""
soakbench - Test orchestration and long-running reliability monitoring.

Components:
- runner        Case/suite runner racing each case against its deadline
- benchmark     Periodic CPU/memory/frame-rate/response-time sampling
- stability     Supervised long-running sessions with recovery dispatch
- compat        One-shot version/feature/environment verdicts
- orchestrator  Runs the above and merges one consolidated report
"""

from __future__ import annotations

__version__ = "0.1.0"

from .benchmark import PerformanceBenchmark
from .compat import CompatibilityProber
from .core import asserts
from .core.options import (
    BenchmarkOptions,
    CompatibilitySettings,
    RunConfig,
    SettleMode,
    StabilityOptions,
)
from .orchestrator import TestOrchestrator
from .probes import HostProbes
from .runner import CaseRunner, SuiteBuilder
from .stability import RecoveryDispatcher, RecoveryStrategy, StabilityMonitor

__all__ = [
    "BenchmarkOptions",
    "CaseRunner",
    "CompatibilityProber",
    "CompatibilitySettings",
    "HostProbes",
    "PerformanceBenchmark",
    "RecoveryDispatcher",
    "RecoveryStrategy",
    "RunConfig",
    "SettleMode",
    "StabilityMonitor",
    "StabilityOptions",
    "SuiteBuilder",
    "TestOrchestrator",
    "__version__",
    "asserts",
]
