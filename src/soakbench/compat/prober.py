"""
prober.py - Compatibility Prober

One-shot environment verdict: target system version, host runtime version
and features, and four environment checks. Every run starts from a fresh
report; probe failures become issue strings or False flags.

Aggregation:
    compatible = target.compatible AND host.compatible
    (AND environment_checks.all_passed when environment_gates_aggregate is set)
"""

from __future__ import annotations

from soakbench.config.logging import get_logger
from soakbench.core.options import CompatibilitySettings
from soakbench.core.types import (
    CompatibilityReport,
    EnvironmentChecks,
    HostRuntimeCompatibility,
    TargetCompatibility,
    elapsed_ms,
    utc_now,
)
from soakbench.probes import HostProbes, file_access_check, safe_probe

from .versions import version_at_least

logger = get_logger("soakbench.compat")


def _display(name: str) -> str:
    return name[:1].upper() + name[1:]


def check_version(
    result: TargetCompatibility,
    name: str,
    detected: str | None,
    required: str,
) -> None:
    """Fill ``result`` with the version verdict for ``name``."""
    result.required_version = required
    result.detected_version = detected
    if not detected:
        result.compatible = False
        result.issues.append(f"Could not detect {_display(name)} version")
        return
    result.compatible = version_at_least(detected, required)
    if not result.compatible:
        result.issues.append(
            f"{_display(name)} version too low. Required: {required}, Found: {detected}"
        )


class CompatibilityProber:
    """Runs the compatibility checks against the injected host probes."""

    def __init__(
        self,
        settings: CompatibilitySettings | None = None,
        probes: HostProbes | None = None,
    ):
        self.settings = settings or CompatibilitySettings()
        self.probes = probes or HostProbes()

    def run(self) -> CompatibilityReport:
        settings = self.settings
        report = CompatibilityReport(
            status="running",
            started_at=utc_now(),
            environment_gates_aggregate=settings.environment_gates_aggregate,
        )
        logger.info("Running compatibility tests", target=settings.target_name, host=settings.host_name)

        report.target_system_compatibility = self.check_target()
        report.host_runtime_compatibility = self.check_host()
        report.environment_checks = self.check_environment()

        compatible = report.versions_compatible
        if settings.environment_gates_aggregate:
            compatible = compatible and report.environment_checks.all_passed

        report.compatible = compatible
        report.status = "completed" if compatible else "failed"
        report.ended_at = utc_now()
        report.duration_ms = elapsed_ms(report.started_at, report.ended_at)

        logger.info(
            "Compatibility tests finished",
            compatible=compatible,
            target_compatible=report.target_system_compatibility.compatible,
            host_compatible=report.host_runtime_compatibility.compatible,
            environment=report.environment_checks.model_dump(),
        )
        return report

    def check_target(self) -> TargetCompatibility:
        settings = self.settings
        result = TargetCompatibility(required_version=settings.target_required_version)
        try:
            check_version(
                result,
                settings.target_name,
                self.probes.read_target_version(),
                settings.target_required_version,
            )
        except Exception as e:
            logger.warning("Target compatibility check failed", error=str(e))
            result.compatible = False
            result.issues.append(f"Error testing compatibility: {e}")
        return result

    def check_host(self) -> HostRuntimeCompatibility:
        settings = self.settings
        result = HostRuntimeCompatibility(required_version=settings.host_required_version)
        try:
            check_version(
                result,
                settings.host_name,
                self.probes.read_host_version(),
                settings.host_required_version,
            )
        except Exception as e:
            logger.warning("Host compatibility check failed", error=str(e))
            result.compatible = False
            result.issues.append(f"Error testing compatibility: {e}")

        for feature in settings.required_features:
            available = self.probes.read_feature(feature)
            result.features[feature] = available
            if not available:
                result.compatible = False
                result.issues.append(f"Required feature not available: {feature}")
        return result

    def check_environment(self) -> EnvironmentChecks:
        return EnvironmentChecks(
            screen_capture=self.probes.read_check("screen_capture"),
            file_access=safe_probe(
                "file_access", file_access_check, False, self.settings.file_check_dir
            ),
            permissions=self.probes.read_check("permissions_granted"),
            touch_simulation=self.probes.read_check("touch_simulation"),
        )


__all__ = ["CompatibilityProber", "check_version"]
