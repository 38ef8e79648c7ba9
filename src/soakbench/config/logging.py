"""
logging.py - Global logging configuration

All harness logs go to stderr; stdout is reserved for report payloads so
``soakbench run --json | jq`` stays clean.

Example output:
    2025-01-21 10:30:45 [INFO    ] soakbench.runner: ✓ PASS suite=Utils case=creates directory
    2025-01-21 10:30:47 [WARNING ] soakbench.stability: Maximum consecutive errors reached errors=3

Usage:
    from soakbench.config.logging import configure_logging, get_logger
    configure_logging(level="INFO")
    logger = get_logger("soakbench.mine")
    logger.info("Benchmark started", name="vision")
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any

import structlog

# ANSI codes for level coloring
_RESET = "\033[0m"
_DIM = "\033[90m"
_NAME = "\033[36m"
_KEY = "\033[35m"
_LEVEL_COLORS = {
    "DEBUG": "\033[90m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m\033[1m",
    "CRITICAL": "\033[31m\033[1m\033[7m",
}

_RESERVED_KEYS = ("logger", "logger_name", "event", "level", "timestamp", "_colors")

_configured = False
_colors = False


def format_log(_logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render one event as ``timestamp [LEVEL] logger: message key=value ...``."""
    colors = event_dict.pop("_colors", None)
    if colors is None:
        colors = _colors

    level = method_name.upper()
    timestamp = event_dict.get("timestamp") or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    name = event_dict.get("logger") or event_dict.get("logger_name") or ""
    message = event_dict.get("event", "")
    extra = {k: v for k, v in event_dict.items() if k not in _RESERVED_KEYS}

    if not colors:
        parts = [f"{timestamp} [{level:<8}]"]
        if name:
            parts.append(f"{name}:")
        parts.append(str(message))
        parts.extend(f"{k}={v}" for k, v in extra.items())
        return " ".join(parts)

    color = _LEVEL_COLORS.get(level, "")
    parts = [f"{_DIM}{timestamp}{_RESET}", f"{color}[{level:<8}]{_RESET}"]
    if name:
        parts.append(f"{_NAME}{name}:{_RESET}")
    parts.append(str(message))
    parts.extend(f"{_KEY}{k}={_RESET}{v}" for k, v in extra.items())
    return " ".join(parts)


def configure_logging(
    level: str = "INFO",
    colors: bool | None = None,
    verbose: bool = False,
    force: bool = False,
) -> None:
    """Configure stdlib logging and structlog to write to stderr.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        colors: Enable ANSI colors. If None, auto-detect from TTY.
        verbose: Shortcut for DEBUG level
        force: Reconfigure even if already configured
    """
    global _configured, _colors

    if _configured and not force:
        return

    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    _colors = sys.stderr.isatty() if colors is None else colors

    root_logger = logging.getLogger()
    root_logger.handlers = []
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            format_log,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str = "soakbench") -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to ``name``."""
    return structlog.get_logger(name)


def is_configured() -> bool:
    return _configured


__all__ = ["configure_logging", "format_log", "get_logger", "is_configured"]
