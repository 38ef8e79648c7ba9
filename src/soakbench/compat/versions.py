"""Dotted version parsing and ordering."""

from __future__ import annotations

import re

_LEADING_DIGITS = re.compile(r"\d+")


def parse_version(version: str) -> tuple[int, ...]:
    """Parse ``"4.2.0-beta"`` into ``(4, 2, 0)``.

    Each dot-separated component contributes its leading digits; a
    component without leading digits counts as 0.
    """
    parts = []
    for component in str(version).strip().split("."):
        match = _LEADING_DIGITS.match(component.strip())
        parts.append(int(match.group()) if match else 0)
    return tuple(parts)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1; missing trailing components are 0 (``1.2 == 1.2.0``)."""
    a = parse_version(left)
    b = parse_version(right)
    width = max(len(a), len(b))
    a += (0,) * (width - len(a))
    b += (0,) * (width - len(b))
    return (a > b) - (a < b)


def version_at_least(version: str, required: str) -> bool:
    return compare_versions(version, required) >= 0


__all__ = ["compare_versions", "parse_version", "version_at_least"]
