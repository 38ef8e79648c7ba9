"""soakbench.stability - Stability Monitor and recovery dispatch."""

from __future__ import annotations

from .monitor import ON_START_ERROR, StabilityMonitor
from .recovery import (
    DEFAULT_STRATEGIES,
    FALLBACK_STRATEGY,
    RecoveryDispatcher,
    RecoveryStrategy,
    assume_recovered,
)

__all__ = [
    "DEFAULT_STRATEGIES",
    "FALLBACK_STRATEGY",
    "ON_START_ERROR",
    "RecoveryDispatcher",
    "RecoveryStrategy",
    "StabilityMonitor",
    "assume_recovered",
]
