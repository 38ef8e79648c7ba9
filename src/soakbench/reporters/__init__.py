"""
soakbench.reporters - Report rendering and persistence.

- JSONReporter: machine-readable, round-trips through load_record
- TextReporter: narrative text
- FileReportSink: writes report files into a directory
- print_summary: rich table for the CLI
"""

from __future__ import annotations

from .base import Reporter
from .console import err_console, print_summary
from .json_reporter import JSONReporter, load_record
from .sink import FileReportSink, slugify
from .text_reporter import TextReporter

__all__ = [
    "FileReportSink",
    "JSONReporter",
    "Reporter",
    "TextReporter",
    "err_console",
    "load_record",
    "print_summary",
    "slugify",
]
