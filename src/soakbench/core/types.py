"""
types.py - Result Records

Every component hands back one of these pydantic models. They serialize to
JSON-equivalent dicts with ``model_dump(mode="json")`` (timestamps become ISO
strings) and load back with ``model_validate`` / ``model_validate_json``.

Records:
- RunResult            case/suite runner outcome log
- BenchmarkRun         one performance benchmark with its sample series
- StabilitySession     one long-running supervised session
- CompatibilityReport  one-shot environment verdict
- ConsolidatedReport   the orchestrator's merged report
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .options import BenchmarkOptions, StabilityOptions


def utc_now() -> datetime:
    """Timezone-aware wall clock used for every record timestamp."""
    return datetime.now(timezone.utc)


def elapsed_ms(start: datetime | None, end: datetime | None) -> float:
    if start is None or end is None:
        return 0.0
    return (end - start).total_seconds() * 1000


# =============================================================================
# Case / Suite outcomes
# =============================================================================


class OutcomeStatus(str, Enum):
    """Outcome tag of a single case."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class TestOutcome(BaseModel):
    """Outcome of one case, tagged with its suite/case identity."""

    __test__: ClassVar[bool] = False

    suite: str
    name: str
    status: OutcomeStatus
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == OutcomeStatus.PASSED


class RunResult(BaseModel):
    """Aggregate of case outcomes for one runner layer.

    Only ``record()`` mutates the counters, which keeps
    ``passed + failed + skipped == len(tests)``.
    """

    layer: str = "unit"
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    tests: list[TestOutcome] = Field(default_factory=list)
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @model_validator(mode="after")
    def _check_counts(self) -> RunResult:
        if self.passed + self.failed + self.skipped != len(self.tests):
            raise ValueError(
                f"outcome counts ({self.passed}+{self.failed}+{self.skipped}) "
                f"do not match {len(self.tests)} recorded outcomes"
            )
        return self

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    @property
    def duration_ms(self) -> float:
        return elapsed_ms(self.started_at, self.ended_at)

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def record(self, outcome: TestOutcome) -> None:
        """Append an outcome and bump the matching counter."""
        if outcome.status == OutcomeStatus.PASSED:
            self.passed += 1
        elif outcome.status == OutcomeStatus.FAILED:
            self.failed += 1
        else:
            self.skipped += 1
        self.tests.append(outcome)

    def counts(self) -> dict[str, int]:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "total": self.total,
        }


# =============================================================================
# Samples & statistics
# =============================================================================


class Sample(BaseModel):
    """A single time-stamped numeric sample."""

    timestamp: datetime = Field(default_factory=utc_now)
    value: float


class ResponseTimeSample(Sample):
    """Response time (ms) of one action."""

    action_type: str


class MemoryInfo(BaseModel):
    """Memory snapshot in bytes."""

    total: float = 0.0
    free: float = 0.0
    used: float = 0.0


class MemorySample(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    value: MemoryInfo


# Ordered, append-only series of one metric.
SampleSeries = list[Sample]


class Statistics(BaseModel):
    """Summary of a sample series snapshot; all zeros for an empty series."""

    model_config = ConfigDict(frozen=True)

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0


# =============================================================================
# Benchmark
# =============================================================================


class BenchmarkState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class BenchmarkSummary(BaseModel):
    cpu_usage: Statistics = Field(default_factory=Statistics)
    frame_rate: Statistics = Field(default_factory=Statistics)
    response_times: dict[str, Statistics] = Field(default_factory=dict)
    memory_usage: Statistics | None = None


class BenchmarkRun(BaseModel):
    """One benchmark run: configuration, lifecycle and its sample series."""

    name: str = "Unnamed Benchmark"
    options: BenchmarkOptions = Field(default_factory=BenchmarkOptions)
    state: BenchmarkState = BenchmarkState.IDLE
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration_ms: float = 0.0
    cpu_usage: list[Sample] = Field(default_factory=list)
    memory_usage: list[MemorySample] = Field(default_factory=list)
    frame_rates: list[Sample] = Field(default_factory=list)
    response_times: list[ResponseTimeSample] = Field(default_factory=list)
    summary: BenchmarkSummary | None = None


# =============================================================================
# Stability
# =============================================================================


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorEvent(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    type: str = "Unknown"
    message: str = "No message"
    data: dict[str, Any] = Field(default_factory=dict)


class RecoveryEvent(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    error_type: str
    action: str
    success: bool


class Checkpoint(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    elapsed_ms: float
    errors: int
    recoveries: int
    memory_usage: MemoryInfo | None = None


class ResourceSample(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    cpu_usage: float | None = None
    memory_usage: MemoryInfo | None = None
    frame_rate: float | None = None


class StabilitySession(BaseModel):
    """One supervised stability session."""

    name: str = "Unnamed Stability Test"
    options: StabilityOptions = Field(default_factory=StabilityOptions)
    state: SessionState = SessionState.NOT_STARTED
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration_ms: float = 0.0
    target_duration_ms: float = 0.0
    consecutive_error_count: int = 0
    errors: list[ErrorEvent] = Field(default_factory=list)
    recoveries: list[RecoveryEvent] = Field(default_factory=list)
    checkpoints: list[Checkpoint] = Field(default_factory=list)
    resource_usage: list[ResourceSample] = Field(default_factory=list)
    performance_benchmark: BenchmarkRun | None = None

    @property
    def running(self) -> bool:
        return self.state == SessionState.RUNNING


class StabilityStatus(BaseModel):
    """Point-in-time view of the current session."""

    running: bool
    name: str | None
    start_time: datetime | None
    duration_ms: float
    errors: int
    recoveries: int
    state: SessionState


# =============================================================================
# Compatibility
# =============================================================================


class TargetCompatibility(BaseModel):
    compatible: bool = False
    detected_version: str | None = None
    required_version: str | None = None
    issues: list[str] = Field(default_factory=list)


class HostRuntimeCompatibility(TargetCompatibility):
    features: dict[str, bool] = Field(default_factory=dict)


class EnvironmentChecks(BaseModel):
    screen_capture: bool = False
    file_access: bool = False
    permissions: bool = False
    touch_simulation: bool = False

    @property
    def all_passed(self) -> bool:
        return self.screen_capture and self.file_access and self.permissions and self.touch_simulation


class CompatibilityReport(BaseModel):
    """One-shot compatibility verdict."""

    target_system_compatibility: TargetCompatibility = Field(default_factory=TargetCompatibility)
    host_runtime_compatibility: HostRuntimeCompatibility = Field(
        default_factory=HostRuntimeCompatibility
    )
    environment_checks: EnvironmentChecks = Field(default_factory=EnvironmentChecks)
    environment_gates_aggregate: bool = False
    compatible: bool = False
    status: str = "not_started"
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_ms: float = 0.0

    @property
    def versions_compatible(self) -> bool:
        return (
            self.target_system_compatibility.compatible
            and self.host_runtime_compatibility.compatible
        )


# =============================================================================
# Orchestrator
# =============================================================================


class ConsolidatedReport(BaseModel):
    """Merged result of one orchestrated run."""

    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_ms: float = 0.0
    unit: RunResult | None = None
    integration: RunResult | None = None
    performance: list[BenchmarkRun] = Field(default_factory=list)
    stability: StabilitySession | None = None
    compatibility: CompatibilityReport | None = None
    errors: dict[str, str] = Field(default_factory=dict)

    def summary(self) -> dict[str, Any]:
        """Compact summary matching the persisted summary report."""
        compat = self.compatibility
        return {
            "unit_tests": self.unit.counts() if self.unit else None,
            "integration_tests": self.integration.counts() if self.integration else None,
            "performance_tests": len(self.performance),
            "stability_tests": 1 if self.stability else 0,
            "stability_status": self.stability.state.value if self.stability else None,
            "compatibility_tests": (
                {
                    "target_compatible": compat.target_system_compatibility.compatible,
                    "host_compatible": compat.host_runtime_compatibility.compatible,
                    "environment_checks": compat.environment_checks.model_dump(),
                    "compatible": compat.compatible,
                }
                if compat
                else None
            ),
            "component_errors": dict(self.errors),
        }


__all__ = [
    "BenchmarkRun",
    "BenchmarkState",
    "BenchmarkSummary",
    "Checkpoint",
    "CompatibilityReport",
    "ConsolidatedReport",
    "EnvironmentChecks",
    "ErrorEvent",
    "HostRuntimeCompatibility",
    "MemoryInfo",
    "MemorySample",
    "OutcomeStatus",
    "RecoveryEvent",
    "ResourceSample",
    "ResponseTimeSample",
    "RunResult",
    "Sample",
    "SampleSeries",
    "SessionState",
    "StabilitySession",
    "StabilityStatus",
    "Statistics",
    "TargetCompatibility",
    "TestOutcome",
    "elapsed_ms",
    "utc_now",
]
