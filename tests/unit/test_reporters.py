"""Tests for text/JSON rendering, the file sink and the console summary."""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone

import pytest
from rich.console import Console

from soakbench.core.types import (
    BenchmarkRun,
    CompatibilityReport,
    ConsolidatedReport,
    ErrorEvent,
    OutcomeStatus,
    RunResult,
    SessionState,
    Statistics,
    StabilitySession,
    TestOutcome,
)
from soakbench.reporters import FileReportSink, JSONReporter, TextReporter, print_summary, slugify
from soakbench.reporters.sink import summary_filename

ENDED = datetime(2024, 5, 1, 12, 30, 15, 123000, tzinfo=timezone.utc)


def _run_result() -> RunResult:
    result = RunResult(layer="unit")
    result.record(TestOutcome(suite="Utils", name="adds", status=OutcomeStatus.PASSED))
    result.record(
        TestOutcome(suite="Utils", name="divides", status=OutcomeStatus.FAILED, error="boom")
    )
    return result


def _report() -> ConsolidatedReport:
    return ConsolidatedReport(
        started_at=ENDED,
        ended_at=ENDED,
        unit=_run_result(),
        performance=[BenchmarkRun(name="Vision Processing Benchmark")],
        stability=StabilitySession(name="Soak", state=SessionState.COMPLETED),
        compatibility=CompatibilityReport(status="completed", compatible=True),
    )


class TestTextReporter:
    def test_run_result_lists_failures(self):
        text = TextReporter().render(_run_result())
        assert "=== Unit Test Results ===" in text
        assert "Passed: 1" in text
        assert "1. Utils > divides: boom" in text

    def test_stability(self):
        session = StabilitySession(
            name="Soak",
            state=SessionState.FAILED,
            errors=[ErrorEvent(type="Timeout", message="slow")],
        )
        text = TextReporter().render(session)
        assert "=== Stability Test Report: Soak ===" in text
        assert "Status: failed" in text
        assert "Total Errors: 1" in text
        assert "1. Timeout: slow" in text

    def test_compatibility(self):
        text = TextReporter().render(CompatibilityReport())
        assert "Compatibility Test Report" in text
        assert "Version: Not detected" in text
        assert "Permissions: Missing" in text

    def test_consolidated(self):
        report = _report()
        report.errors["performance"] = "RuntimeError: no display"
        text = TextReporter().render(report)
        assert "Unit Tests:" in text
        assert "Completed: 1 benchmarks" in text
        assert "performance: RuntimeError: no display" in text

    def test_unknown_record_type(self):
        with pytest.raises(TypeError):
            TextReporter().render(Statistics())


def test_json_reporter_serializes_timestamps():
    data = json.loads(JSONReporter().render(_report()))
    assert data["started_at"].startswith("2024-05-01T12:30:15")
    assert data["unit"]["failed"] == 1
    assert data["stability"]["state"] == "completed"


def test_emit_writes_to_stream():
    stream = io.StringIO()
    JSONReporter(indent=None).emit(Statistics(), stream)
    assert json.loads(stream.getvalue()) == {"min": 0.0, "max": 0.0, "avg": 0.0, "median": 0.0}


class TestFileReportSink:
    def test_slugify(self):
        assert slugify("  Vision Processing  Benchmark ") == "vision_processing_benchmark"

    def test_summary_filename(self):
        name = summary_filename(ConsolidatedReport(ended_at=ENDED))
        assert name == "test_summary_2024_05_01T12_30_15_123000_00_00.json"

    def test_save_writes_every_file(self, tmp_path):
        sink = FileReportSink(tmp_path / "reports")
        assert sink.save(_report()) is True

        names = sorted(p.name for p in (tmp_path / "reports").iterdir())
        assert names == sorted(
            [
                "compatibility_test_report.json",
                "performance_vision_processing_benchmark.json",
                "stability_test_report.json",
                summary_filename(_report()),
            ]
        )
        summary = json.loads((tmp_path / "reports" / summary_filename(_report())).read_text())
        assert summary["summary"]["unit_tests"] == {
            "passed": 1,
            "failed": 1,
            "skipped": 0,
            "total": 2,
        }
        assert summary["summary"]["stability_status"] == "completed"
        assert len(sink.written) == 4

    def test_write_failure_is_reported_not_raised(self, tmp_path):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("occupied")

        sink = FileReportSink(blocker)
        assert sink.save(_report()) is False
        assert sink.written == []


def test_print_summary_renders_table():
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    report = _report()
    report.errors["integration"] = "ValueError: bad"

    print_summary(report, console)
    output = buffer.getvalue()

    assert "Test Summary" in output
    assert "Unit Tests" in output
    assert "1 passed, 1 failed, 0 skipped" in output
    assert "integration (error)" in output
    assert "Test Run Duration: 0.00 seconds" in output
