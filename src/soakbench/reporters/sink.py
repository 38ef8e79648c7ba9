"""
sink.py - File report sink

Persists a ConsolidatedReport as JSON files under ``report_path``:

    test_summary_<timestamp>.json
    performance_<scenario_slug>.json      one per benchmark
    stability_test_report.json
    compatibility_test_report.json

Write failures are logged and reported as False; they never raise.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import BaseModel

from soakbench.config.logging import get_logger
from soakbench.core.types import ConsolidatedReport, utc_now

from .json_reporter import JSONReporter

logger = get_logger("soakbench.reporters")


def slugify(name: str) -> str:
    """``"Vision Processing Benchmark"`` -> ``"vision_processing_benchmark"``."""
    return re.sub(r"\s+", "_", name.strip().lower())


def summary_filename(report: ConsolidatedReport) -> str:
    stamp = (report.ended_at or utc_now()).isoformat()
    return f"test_summary_{re.sub(r'[:.+-]', '_', stamp)}.json"


class FileReportSink:
    """Writes report files into one directory."""

    def __init__(self, report_path: str | Path, reporter: JSONReporter | None = None):
        self.report_path = Path(report_path)
        self.reporter = reporter or JSONReporter()
        self.written: list[Path] = []

    def _write(self, filename: str, content: str) -> bool:
        path = self.report_path / filename
        try:
            self.report_path.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save report", path=str(path), error=str(e))
            return False
        self.written.append(path)
        logger.info("Report saved", path=str(path))
        return True

    def write_record(self, filename: str, record: BaseModel) -> bool:
        return self._write(filename, self.reporter.render(record))

    def write_summary(self, report: ConsolidatedReport) -> bool:
        payload = {
            "timestamp": utc_now().isoformat(),
            "test_runner": {
                "start_time": report.started_at.isoformat() if report.started_at else None,
                "end_time": report.ended_at.isoformat() if report.ended_at else None,
                "duration_ms": report.duration_ms,
            },
            "summary": report.summary(),
        }
        return self._write(summary_filename(report), json.dumps(payload, indent=2))

    def save(self, report: ConsolidatedReport) -> bool:
        """Write every report file; True only if all writes succeeded."""
        ok = True
        for run in report.performance:
            ok = self.write_record(f"performance_{slugify(run.name)}.json", run) and ok
        if report.stability is not None:
            ok = self.write_record("stability_test_report.json", report.stability) and ok
        if report.compatibility is not None:
            ok = self.write_record("compatibility_test_report.json", report.compatibility) and ok
        ok = self.write_summary(report) and ok
        return ok


__all__ = ["FileReportSink", "slugify", "summary_filename"]
