"""Tests for the result records in soakbench.core.types."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from soakbench.compat.prober import CompatibilityProber
from soakbench.core.options import CompatibilitySettings
from soakbench.core.types import (
    BenchmarkRun,
    CompatibilityReport,
    ConsolidatedReport,
    ErrorEvent,
    MemoryInfo,
    MemorySample,
    OutcomeStatus,
    RecoveryEvent,
    ResponseTimeSample,
    RunResult,
    Sample,
    SessionState,
    StabilitySession,
    TestOutcome,
    utc_now,
)
from soakbench.probes import HostProbes
from soakbench.reporters import JSONReporter, load_record


def _result() -> RunResult:
    result = RunResult(layer="unit", started_at=utc_now())
    result.record(TestOutcome(suite="Utils", name="a", status=OutcomeStatus.PASSED))
    result.record(TestOutcome(suite="Utils", name="b", status=OutcomeStatus.FAILED, error="boom"))
    result.record(TestOutcome(suite="Vision", name="c", status=OutcomeStatus.SKIPPED))
    result.ended_at = utc_now()
    return result


class TestRunResult:
    def test_record_keeps_counts_in_step_with_outcomes(self):
        result = _result()
        assert (result.passed, result.failed, result.skipped) == (1, 1, 1)
        assert result.total == len(result.tests) == 3
        assert [t.name for t in result.tests] == ["a", "b", "c"]
        assert result.counts() == {"passed": 1, "failed": 1, "skipped": 1, "total": 3}
        assert not result.all_passed

    def test_inconsistent_counts_are_rejected(self):
        with pytest.raises(ValidationError):
            RunResult(passed=2, tests=[])

    def test_json_round_trip(self):
        result = _result()
        payload = JSONReporter().to_dict(result)
        assert isinstance(payload["started_at"], str)

        loaded = load_record(RunResult, JSONReporter().render(result))
        assert loaded == result
        assert loaded.started_at.tzinfo is not None


def test_benchmark_run_round_trip():
    run = BenchmarkRun(name="Vision", start_time=utc_now(), end_time=utc_now(), duration_ms=12.5)
    run.cpu_usage.append(Sample(value=12.0))
    run.frame_rates.append(Sample(value=29.5))
    run.response_times.append(ResponseTimeSample(action_type="swipe", value=41.0))
    run.memory_usage.append(MemorySample(value=MemoryInfo(total=8e9, free=6e9, used=2e9)))

    loaded = load_record(BenchmarkRun, JSONReporter().render(run))
    assert loaded == run
    assert loaded.response_times[0].action_type == "swipe"


def test_stability_session_round_trip():
    session = StabilitySession(name="Soak", state=SessionState.COMPLETED, start_time=utc_now())
    session.errors.append(ErrorEvent(type="Timeout", message="slow", data={"step": 3}))
    session.recoveries.append(RecoveryEvent(error_type="Timeout", action="restart", success=True))

    loaded = load_record(StabilitySession, JSONReporter().render(session))
    assert loaded == session
    assert loaded.errors[0].timestamp.utcoffset() == timedelta(0)


def _compatibility_report(tmp_path) -> CompatibilityReport:
    probes = HostProbes(
        target_app_version=lambda: "6.9.0",
        host_runtime_version=lambda: "3.12.1",
        feature_available=lambda name: name != "subprocess",
    )
    return CompatibilityProber(CompatibilitySettings(file_check_dir=str(tmp_path)), probes).run()


def test_compatibility_report_round_trip(tmp_path):
    report = _compatibility_report(tmp_path)
    assert report.target_system_compatibility.issues
    assert report.host_runtime_compatibility.features["subprocess"] is False

    loaded = load_record(CompatibilityReport, JSONReporter().render(report))
    assert loaded == report
    assert loaded.started_at.tzinfo is not None


def test_consolidated_report_round_trip(tmp_path):
    benchmark = BenchmarkRun(name="Vision", start_time=utc_now(), end_time=utc_now())
    benchmark.frame_rates.append(Sample(value=30.0))
    session = StabilitySession(name="Soak", state=SessionState.FAILED, start_time=utc_now())
    session.errors.append(ErrorEvent(type="Crash", message="gone", data={"attempt": 2}))
    session.performance_benchmark = benchmark
    report = ConsolidatedReport(
        started_at=utc_now(),
        ended_at=utc_now(),
        unit=_result(),
        performance=[benchmark, BenchmarkRun(name="Control")],
        stability=session,
        compatibility=_compatibility_report(tmp_path),
        errors={"integration": "RuntimeError: boom"},
    )

    loaded = load_record(ConsolidatedReport, JSONReporter().render(report))
    assert loaded == report
    assert loaded.stability.errors[0].data == {"attempt": 2}
    assert loaded.summary() == report.summary()


def test_error_event_defaults():
    event = ErrorEvent()
    assert event.type == "Unknown"
    assert event.message == "No message"
    assert event.data == {}


def test_consolidated_summary():
    compat = CompatibilityReport(compatible=True)
    compat.target_system_compatibility.compatible = True
    compat.host_runtime_compatibility.compatible = True
    report = ConsolidatedReport(
        unit=_result(),
        performance=[BenchmarkRun(name="a"), BenchmarkRun(name="b")],
        stability=StabilitySession(state=SessionState.FAILED),
        compatibility=compat,
        errors={"integration": "RuntimeError: boom"},
    )

    summary = report.summary()
    assert summary["unit_tests"]["total"] == 3
    assert summary["integration_tests"] is None
    assert summary["performance_tests"] == 2
    assert summary["stability_tests"] == 1
    assert summary["stability_status"] == "failed"
    assert summary["compatibility_tests"]["compatible"] is True
    assert summary["compatibility_tests"]["environment_checks"]["file_access"] is False
    assert summary["component_errors"] == {"integration": "RuntimeError: boom"}
