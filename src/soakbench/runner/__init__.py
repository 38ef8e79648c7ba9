"""
soakbench.runner - Case/Suite Runner

The same runner contract serves the unit and integration layers; only the
case definitions differ.
"""

from __future__ import annotations

from .race import TestFunction, race, timeout_message
from .suite import CaseRunner, SuiteBuilder, TestCase

__all__ = [
    "CaseRunner",
    "SuiteBuilder",
    "TestCase",
    "TestFunction",
    "race",
    "timeout_message",
]
