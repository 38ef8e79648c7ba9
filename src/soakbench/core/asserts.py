"""Assertion helpers for test functions.

Pure predicate checks: each helper raises AssertionFailure with a clear
message, which the case runner records as a failed outcome.

Usage:
    from soakbench.core import asserts

    def test_directory():
        asserts.is_true(ensure_directory(path), "Directory creation failed")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .errors import AssertionFailure


def is_true(condition: Any, message: str = "") -> None:
    """Assert that condition is truthy."""
    if not condition:
        raise AssertionFailure(message or "Expected true but got false")


def is_false(condition: Any, message: str = "") -> None:
    """Assert that condition is falsy."""
    if condition:
        raise AssertionFailure(message or "Expected false but got true")


def equal(actual: Any, expected: Any, message: str = "") -> None:
    """Assert that actual == expected."""
    if actual != expected:
        raise AssertionFailure(message or f"Expected {expected!r} but got {actual!r}")


def strict_equal(actual: Any, expected: Any, message: str = "") -> None:
    """Assert that actual equals expected and has the same type."""
    if type(actual) is not type(expected) or actual != expected:
        raise AssertionFailure(
            message
            or f"Expected {expected!r} ({type(expected).__name__}) "
            f"but got {actual!r} ({type(actual).__name__})"
        )


def is_defined(value: Any, message: str = "") -> None:
    """Assert that value is not None."""
    if value is None:
        raise AssertionFailure(message or "Expected value to be defined")


def throws(
    fn: Callable[[], Any],
    message: str = "",
    expected: type[BaseException] = Exception,
) -> BaseException:
    """Assert that fn raises (optionally a specific exception type).

    Returns the raised exception so callers can inspect it.
    """
    try:
        fn()
    except expected as e:
        return e
    raise AssertionFailure(message or "Expected function to throw an error")


__all__ = [
    "equal",
    "is_defined",
    "is_false",
    "is_true",
    "strict_equal",
    "throws",
]
