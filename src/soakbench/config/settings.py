"""
settings.py - YAML settings loader

Layers (later wins):
    1. Built-in RunConfig defaults
    2. Settings file: explicit path, else $SOAKBENCH_CONFIG
    3. Overrides passed by the caller (CLI flags)

File layout:
    testing:                 # RunConfig switches
      run_performance: true
      per_case_timeout_ms: 5000
      report_path: reports
    benchmarking:            # PerformanceBenchmark defaults
      sample_interval_ms: 500
      scenarios:
        - name: Vision Processing Benchmark
          duration_ms: 10000
    stability_testing:       # stability scenario
      name: Overnight Soak
      duration_ms: 28800000
      max_consecutive_errors: 5
    compatibility_testing:   # CompatibilitySettings
      target_required_version: "7.0.0"
      environment_gates_aggregate: true
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from soakbench.core.errors import ConfigurationError
from soakbench.core.options import (
    BenchmarkOptions,
    BenchmarkScenario,
    CompatibilitySettings,
    RunConfig,
    StabilityOptions,
    StabilityScenario,
    merge_options,
)

from .logging import get_logger

logger = get_logger("soakbench.settings")

CONFIG_ENV_VAR = "SOAKBENCH_CONFIG"

SECTIONS = ("testing", "benchmarking", "stability_testing", "compatibility_testing")


def resolve_config_path(path: str | os.PathLike[str] | None = None) -> Path | None:
    """Explicit path first, then $SOAKBENCH_CONFIG, else None."""
    if path:
        return Path(path)
    env = os.environ.get(CONFIG_ENV_VAR)
    return Path(env) if env else None


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file is an empty mapping."""
    if not path.is_file():
        raise ConfigurationError("settings file not found", source=str(path))
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", source=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("top level must be a mapping", source=str(path))
    return data


def _section(data: Mapping[str, Any], key: str, source: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"section '{key}' must be a mapping", source=source)
    return dict(value)


def _scenarios(raw: Any, source: str) -> list[BenchmarkScenario]:
    if not isinstance(raw, list):
        raise ConfigurationError("benchmarking.scenarios must be a list", source=source)
    try:
        return [BenchmarkScenario.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ConfigurationError(str(e), source=f"{source}: benchmarking.scenarios") from e


def build_run_config(
    data: Mapping[str, Any],
    *,
    overrides: Mapping[str, Any] | None = None,
    source: str = "<settings>",
) -> RunConfig:
    """Validate a settings mapping into a RunConfig."""
    unknown = sorted(set(data) - set(SECTIONS))
    if unknown:
        logger.warning("Ignoring unknown settings sections", sections=unknown, source=source)

    testing = _section(data, "testing", source)
    benchmarking = _section(data, "benchmarking", source)
    stability = _section(data, "stability_testing", source)
    compatibility = _section(data, "compatibility_testing", source)

    config = merge_options(RunConfig, None, testing, source=f"{source}: testing")

    raw_scenarios = benchmarking.pop("scenarios", None)
    config.benchmark_defaults = merge_options(
        BenchmarkOptions, None, benchmarking, source=f"{source}: benchmarking"
    )
    if raw_scenarios is not None:
        config.performance_scenarios = _scenarios(raw_scenarios, source)

    if stability:
        name = stability.pop("name", config.stability_scenario.name)
        options = merge_options(
            StabilityOptions,
            config.stability_scenario.options,
            stability,
            source=f"{source}: stability_testing",
        )
        config.stability_scenario = StabilityScenario(name=name, options=options)

    config.compatibility = merge_options(
        CompatibilitySettings, None, compatibility, source=f"{source}: compatibility_testing"
    )

    if overrides:
        # Only the overridden fields are replaced; nested option models keep
        # their explicitly-set fields so scenario options still layer over
        # the benchmarking defaults.
        patched = merge_options(RunConfig, config, overrides, source="overrides")
        keys = set(overrides) & set(RunConfig.model_fields)
        config = config.model_copy(update={key: getattr(patched, key) for key in keys})
    return config


def load_run_config(
    path: str | os.PathLike[str] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> RunConfig:
    """Load the effective RunConfig from defaults, settings file and overrides."""
    resolved = resolve_config_path(path)
    if resolved is None:
        data: dict[str, Any] = {}
        source = "<defaults>"
    else:
        data = read_yaml(resolved)
        source = str(resolved)
        logger.debug("Loaded settings file", path=source)
    return build_run_config(data, overrides=overrides, source=source)


__all__ = [
    "CONFIG_ENV_VAR",
    "SECTIONS",
    "build_run_config",
    "load_run_config",
    "read_yaml",
    "resolve_config_path",
]
