"""Narrative (human-readable) reports for every record type."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from soakbench.core.types import (
    BenchmarkRun,
    CompatibilityReport,
    ConsolidatedReport,
    OutcomeStatus,
    RunResult,
    StabilitySession,
)

from .base import Reporter

_MB = 1024 * 1024


def _ts(value: datetime | None) -> str:
    return value.isoformat() if value else "-"


def _seconds(ms: float) -> str:
    return f"{ms / 1000:g}"


def _yes(flag: bool, yes: str = "Yes", no: str = "No") -> str:
    return yes if flag else no


class TextReporter(Reporter):
    """Renders RunResult, BenchmarkRun, StabilitySession, CompatibilityReport
    and ConsolidatedReport as plain text."""

    def render(self, record: BaseModel) -> str:
        if isinstance(record, RunResult):
            lines = self._run_result(record)
        elif isinstance(record, BenchmarkRun):
            lines = self._benchmark(record)
        elif isinstance(record, StabilitySession):
            lines = self._stability(record)
        elif isinstance(record, CompatibilityReport):
            lines = self._compatibility(record)
        elif isinstance(record, ConsolidatedReport):
            lines = self._consolidated(record)
        else:
            raise TypeError(f"No text rendering for {type(record).__name__}")
        return "\n".join(lines) + "\n"

    def _run_result(self, result: RunResult) -> list[str]:
        lines = [
            f"=== {result.layer.capitalize()} Test Results ===",
            f"Passed: {result.passed}",
            f"Failed: {result.failed}",
            f"Skipped: {result.skipped}",
            f"Total: {result.total}",
        ]
        failures = [t for t in result.tests if t.status == OutcomeStatus.FAILED]
        if failures:
            lines += ["", "--- Failures ---"]
            lines += [f"{i}. {t.suite} > {t.name}: {t.error}" for i, t in enumerate(failures, 1)]
        return lines

    def _benchmark(self, run: BenchmarkRun) -> list[str]:
        lines = [
            f"=== Performance Benchmark Report: {run.name} ===",
            f"Duration: {_seconds(run.duration_ms)} seconds",
            f"Start Time: {_ts(run.start_time)}",
            f"End Time: {_ts(run.end_time)}",
            "",
        ]
        summary = run.summary
        if summary is None:
            return lines

        cpu, fps = summary.cpu_usage, summary.frame_rate
        lines += [
            "--- Summary Statistics ---",
            f"CPU Usage: Min: {cpu.min:.2f}%, Max: {cpu.max:.2f}%, Avg: {cpu.avg:.2f}%",
            f"Frame Rate: Min: {fps.min:.2f} FPS, Max: {fps.max:.2f} FPS, Avg: {fps.avg:.2f} FPS",
        ]
        if summary.memory_usage is not None:
            lines.append(f"Memory Usage: Avg: {summary.memory_usage.avg / _MB:.2f} MB")
        if summary.response_times:
            lines += ["", "Response Times:"]
            for action, stats in summary.response_times.items():
                lines.append(
                    f"  {action}: Min: {stats.min:.2f}ms, Max: {stats.max:.2f}ms, "
                    f"Avg: {stats.avg:.2f}ms, Median: {stats.median:.2f}ms"
                )
        return lines

    def _stability(self, session: StabilitySession) -> list[str]:
        lines = [
            f"=== Stability Test Report: {session.name} ===",
            f"Status: {session.state.value}",
            f"Duration: {_seconds(session.duration_ms)} seconds",
            f"Start Time: {_ts(session.start_time)}",
            f"End Time: {_ts(session.end_time)}",
            "",
            "--- Error Summary ---",
            f"Total Errors: {len(session.errors)}",
            f"Total Recoveries: {len(session.recoveries)}",
            "",
        ]
        if session.errors:
            lines.append("--- Error Details ---")
            lines += [
                f"{i}. {e.type}: {e.message} ({_ts(e.timestamp)})"
                for i, e in enumerate(session.errors, 1)
            ]
            lines.append("")
        if session.checkpoints:
            lines.append("--- Checkpoints ---")
            lines += [
                f"{i}. {_ts(c.timestamp)} ({_seconds(c.elapsed_ms)} seconds)"
                for i, c in enumerate(session.checkpoints, 1)
            ]
            lines.append("")
        return lines

    def _compatibility(self, report: CompatibilityReport) -> list[str]:
        target = report.target_system_compatibility
        host = report.host_runtime_compatibility
        env = report.environment_checks
        lines = [
            "Compatibility Test Report",
            "========================",
            f"Date: {_ts(report.ended_at or report.started_at)}",
            f"Status: {report.status}",
            "",
            "Target System Compatibility:",
            f"  Compatible: {_yes(target.compatible)}",
            f"  Version: {target.detected_version or 'Not detected'}",
            f"  Required Version: {target.required_version}",
        ]
        if target.issues:
            lines.append(f"  Issues: {', '.join(target.issues)}")

        lines += [
            "",
            "Host Runtime Compatibility:",
            f"  Compatible: {_yes(host.compatible)}",
            f"  Version: {host.detected_version or 'Not detected'}",
            f"  Required Version: {host.required_version}",
            "  Features:",
        ]
        lines += [
            f"    - {feature}: {_yes(ok, 'Available', 'Not available')}"
            for feature, ok in host.features.items()
        ]
        if host.issues:
            lines.append(f"  Issues: {', '.join(host.issues)}")

        lines += [
            "",
            "Environment Tests:",
            f"  Screen Capture: {_yes(env.screen_capture, 'Working', 'Failed')}",
            f"  File Access: {_yes(env.file_access, 'Working', 'Failed')}",
            f"  Permissions: {_yes(env.permissions, 'Granted', 'Missing')}",
            f"  Touch Simulation: {_yes(env.touch_simulation, 'Working', 'Failed')}",
        ]
        return lines

    def _consolidated(self, report: ConsolidatedReport) -> list[str]:
        lines = ["=== Test Summary ===", f"Test Run Duration: {_seconds(report.duration_ms)} seconds"]
        for label, result in (("Unit Tests", report.unit), ("Integration Tests", report.integration)):
            if result is None:
                continue
            lines += [
                "",
                f"{label}:",
                f"  Passed: {result.passed}",
                f"  Failed: {result.failed}",
                f"  Skipped: {result.skipped}",
                f"  Total: {result.total}",
            ]
        if report.performance:
            lines += ["", "Performance Tests:", f"  Completed: {len(report.performance)} benchmarks"]
        if report.stability is not None:
            s = report.stability
            lines += [
                "",
                "Stability Tests:",
                f"  Status: {s.state.value}",
                f"  Duration: {_seconds(s.duration_ms)} seconds",
                f"  Errors: {len(s.errors)}",
                f"  Recoveries: {len(s.recoveries)}",
            ]
        if report.compatibility is not None:
            c = report.compatibility
            compatible = _yes(c.target_system_compatibility.compatible, "Compatible", "Not compatible")
            host = _yes(c.host_runtime_compatibility.compatible, "Compatible", "Not compatible")
            lines += [
                "",
                "Compatibility Tests:",
                f"  Target System Compatibility: {compatible}",
                f"  Host Runtime Compatibility: {host}",
                f"  Environment Tests: {_yes(c.environment_checks.all_passed, 'Passed', 'Failed')}",
            ]
        if report.errors:
            lines += ["", "Component Errors:"]
            lines += [f"  {name}: {message}" for name, message in report.errors.items()]
        return lines


__all__ = ["TextReporter"]
