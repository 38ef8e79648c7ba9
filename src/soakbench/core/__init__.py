"""
soakbench.core - Records, options, statistics, assertions and timers.

Everything here is free of scheduling policy; the runner, benchmark,
stability and compat packages build on it.
"""

from __future__ import annotations

from . import asserts
from .errors import (
    AssertionFailure,
    ConfigurationError,
    HarnessError,
    HarnessStateError,
    ProbeError,
)
from .options import (
    BenchmarkOptions,
    BenchmarkScenario,
    CompatibilitySettings,
    RunConfig,
    SettleMode,
    StabilityOptions,
    StabilityScenario,
    merge_options,
)
from .statistics import calculate_statistics, series_statistics
from .types import (
    BenchmarkRun,
    BenchmarkState,
    BenchmarkSummary,
    Checkpoint,
    CompatibilityReport,
    ConsolidatedReport,
    EnvironmentChecks,
    ErrorEvent,
    HostRuntimeCompatibility,
    MemoryInfo,
    MemorySample,
    OutcomeStatus,
    RecoveryEvent,
    ResourceSample,
    ResponseTimeSample,
    RunResult,
    Sample,
    SessionState,
    StabilitySession,
    StabilityStatus,
    Statistics,
    TargetCompatibility,
    TestOutcome,
)

__all__ = [
    "AssertionFailure",
    "BenchmarkOptions",
    "BenchmarkRun",
    "BenchmarkScenario",
    "BenchmarkState",
    "BenchmarkSummary",
    "Checkpoint",
    "CompatibilityReport",
    "CompatibilitySettings",
    "ConfigurationError",
    "ConsolidatedReport",
    "EnvironmentChecks",
    "ErrorEvent",
    "HarnessError",
    "HarnessStateError",
    "HostRuntimeCompatibility",
    "MemoryInfo",
    "MemorySample",
    "OutcomeStatus",
    "ProbeError",
    "RecoveryEvent",
    "ResourceSample",
    "ResponseTimeSample",
    "RunConfig",
    "RunResult",
    "Sample",
    "SessionState",
    "SettleMode",
    "StabilityOptions",
    "StabilityScenario",
    "StabilitySession",
    "StabilityStatus",
    "Statistics",
    "TargetCompatibility",
    "TestOutcome",
    "asserts",
    "calculate_statistics",
    "merge_options",
    "series_statistics",
]
