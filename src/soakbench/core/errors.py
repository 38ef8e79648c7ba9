"""
errors.py - Harness Error Hierarchy

Failures inside test functions, probes and sessions are turned into data
(outcomes, issue strings, booleans). Only programmer errors in the harness
itself propagate to the caller.

Hierarchy:
    HarnessError
    ├── ConfigurationError   malformed options / settings (propagates)
    ├── HarnessStateError    lifecycle misuse (propagates)
    ├── ProbeError           host probe failure (always contained)
    └── AssertionFailure     raised by soakbench.core.asserts (contained by the runner)
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for all soakbench errors."""


class ConfigurationError(HarnessError):
    """Raised when options or settings cannot be validated."""

    def __init__(self, message: str, *, source: str | None = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class HarnessStateError(HarnessError):
    """Raised when a component is driven outside its lifecycle contract."""


class ProbeError(HarnessError):
    """A host probe raised while being queried."""

    def __init__(self, probe: str, cause: BaseException):
        self.probe = probe
        self.cause = cause
        super().__init__(f"Probe '{probe}' failed: {cause}")


class AssertionFailure(HarnessError, AssertionError):
    """Raised by assertion helpers; recorded as a failed outcome."""


__all__ = [
    "AssertionFailure",
    "ConfigurationError",
    "HarnessError",
    "HarnessStateError",
    "ProbeError",
]
