"""Tests for logging configuration."""

from __future__ import annotations

import logging

from soakbench.config import configure_logging, get_logger, is_configured
from soakbench.config.logging import format_log


def test_plain_format():
    line = format_log(
        None,
        "warning",
        {
            "event": "Recovery failed",
            "logger": "soakbench.stability",
            "timestamp": "2025-01-21 10:30:45",
            "action": "restart",
            "_colors": False,
        },
    )
    assert line == "2025-01-21 10:30:45 [WARNING ] soakbench.stability: Recovery failed action=restart"


def test_colored_format_keeps_message():
    line = format_log(None, "info", {"event": "Benchmark started", "_colors": True})
    assert "Benchmark started" in line
    assert "\033[" in line


def test_configure_logging_routes_to_stderr(capsys):
    configure_logging(level="INFO", colors=False, force=True)
    assert is_configured()
    assert logging.getLogger().level == logging.INFO

    get_logger("soakbench.test").info("Benchmark started", name="vision")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "soakbench.test: Benchmark started name=vision" in captured.err


def test_verbose_enables_debug():
    configure_logging(verbose=True, colors=False, force=True)
    assert logging.getLogger().level == logging.DEBUG


def test_second_call_without_force_is_ignored():
    configure_logging(level="ERROR", colors=False, force=True)
    configure_logging(level="DEBUG", colors=False)
    assert logging.getLogger().level == logging.ERROR
