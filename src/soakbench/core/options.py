"""
options.py - Component Options & Run Configuration

Pydantic models for every tunable knob. Options passed to ``start()`` calls
are merged over the component defaults with ``merge_options``: unknown keys
are ignored (with a warning), invalid values raise ConfigurationError.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from soakbench.config.logging import get_logger

from .errors import ConfigurationError

logger = get_logger("soakbench.options")

M = TypeVar("M", bound=BaseModel)


class _Options(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)


class BenchmarkOptions(_Options):
    """Performance benchmark sampling configuration."""

    sample_interval_ms: float = Field(1000, gt=0)
    # simple: elapsed-time heuristic when no CPU probe; detailed: process CPU via psutil
    cpu_sampling_method: Literal["simple", "detailed"] = "simple"
    memory_tracking_enabled: bool = True
    frame_rate_tracking_enabled: bool = True
    response_time_tracking_enabled: bool = True
    report_format: Literal["json", "text"] = "json"


class StabilityOptions(_Options):
    """Stability session thresholds and intervals."""

    duration_ms: float = Field(60 * 60 * 1000, gt=0)
    checkpoint_interval_ms: float = Field(5 * 60 * 1000, gt=0)
    resource_sample_interval_ms: float = Field(60 * 1000, gt=0)
    recovery_timeout_ms: float = Field(30 * 1000, gt=0)
    max_errors: int = Field(10, ge=1)
    max_consecutive_errors: int = Field(3, ge=1)
    checkpoint_memory: bool = True


class CompatibilitySettings(_Options):
    """Version thresholds, required features and the aggregation policy."""

    target_name: str = "target"
    target_required_version: str = "7.0.0"
    host_name: str = "python"
    host_required_version: str = "3.10.0"
    required_features: list[str] = Field(
        default_factory=lambda: ["asyncio", "threads", "files", "subprocess"]
    )
    file_check_dir: str | None = None
    # False: environment checks are reported but do not gate the aggregate verdict
    environment_gates_aggregate: bool = False


class SettleMode(str, Enum):
    """How ``CaseRunner.run()`` waits for outstanding cases."""

    JOIN = "join"
    GRACE = "grace"


class BenchmarkScenario(_Options):
    name: str
    duration_ms: float = Field(30 * 1000, gt=0)
    options: BenchmarkOptions = Field(default_factory=BenchmarkOptions)


class StabilityScenario(_Options):
    name: str = "Core Functionality Stability Test"
    options: StabilityOptions = Field(
        default_factory=lambda: StabilityOptions(
            duration_ms=5 * 60 * 1000,
            checkpoint_interval_ms=30 * 1000,
            resource_sample_interval_ms=15 * 1000,
        )
    )


def _default_scenarios() -> list[BenchmarkScenario]:
    return [
        BenchmarkScenario(
            name="Vision Processing Benchmark",
            options=BenchmarkOptions(
                sample_interval_ms=500,
                frame_rate_tracking_enabled=True,
                memory_tracking_enabled=True,
            ),
        ),
        BenchmarkScenario(
            name="Decision Making Benchmark",
            options=BenchmarkOptions(sample_interval_ms=500, response_time_tracking_enabled=True),
        ),
        BenchmarkScenario(
            name="Control Execution Benchmark",
            options=BenchmarkOptions(sample_interval_ms=500, response_time_tracking_enabled=True),
        ),
    ]


class RunConfig(_Options):
    """Orchestrator run configuration."""

    run_unit: bool = True
    run_integration: bool = True
    run_performance: bool = False
    run_stability: bool = False
    run_compatibility: bool = True
    generate_reports: bool = True
    report_path: str = "test_reports"
    per_case_timeout_ms: int = Field(10_000, gt=0)
    settle_mode: SettleMode = SettleMode.JOIN
    grace_period_ms: float = Field(1000, ge=0)
    cancel_on_timeout: bool = False
    benchmark_defaults: BenchmarkOptions = Field(default_factory=BenchmarkOptions)
    performance_scenarios: list[BenchmarkScenario] = Field(default_factory=_default_scenarios)
    stability_scenario: StabilityScenario = Field(default_factory=StabilityScenario)
    compatibility: CompatibilitySettings = Field(default_factory=CompatibilitySettings)


def _as_mapping(overrides: BaseModel | Mapping[str, Any] | None) -> dict[str, Any]:
    if overrides is None:
        return {}
    if isinstance(overrides, BaseModel):
        return overrides.model_dump(exclude_unset=True)
    if isinstance(overrides, Mapping):
        return dict(overrides)
    raise ConfigurationError(f"options must be a mapping or model, got {type(overrides).__name__}")


def merge_options(
    model_cls: type[M],
    defaults: M | None,
    overrides: BaseModel | Mapping[str, Any] | None,
    *,
    source: str | None = None,
) -> M:
    """Merge overrides over defaults and validate the result as ``model_cls``."""
    base = defaults.model_dump() if defaults is not None else {}
    update = _as_mapping(overrides)

    unknown = sorted(set(update) - set(model_cls.model_fields))
    if unknown:
        logger.warning("Ignoring unknown options", keys=unknown, model=model_cls.__name__)

    try:
        return model_cls.model_validate({**base, **update})
    except ValidationError as e:
        raise ConfigurationError(str(e), source=source or model_cls.__name__) from e


__all__ = [
    "BenchmarkOptions",
    "BenchmarkScenario",
    "CompatibilitySettings",
    "RunConfig",
    "SettleMode",
    "StabilityOptions",
    "StabilityScenario",
    "merge_options",
]
