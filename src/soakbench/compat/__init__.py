"""soakbench.compat - Compatibility Prober."""

from __future__ import annotations

from .prober import CompatibilityProber, check_version
from .versions import compare_versions, parse_version, version_at_least

__all__ = [
    "CompatibilityProber",
    "check_version",
    "compare_versions",
    "parse_version",
    "version_at_least",
]
