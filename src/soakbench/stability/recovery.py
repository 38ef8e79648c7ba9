"""
recovery.py - Recovery Strategies

Maps an error type to a recovery action. The default table mirrors the
field-tested actions; every default ``recover`` reports success. Replace or
add strategies to run real corrective actions:

    dispatcher = RecoveryDispatcher()
    dispatcher.register("ScreenDetectionFailed", RecoveryStrategy("new_screenshot", retake))

A ``recover`` callable receives the ErrorEvent and returns a bool, or an
awaitable resolving to one.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Union

from soakbench.core.types import ErrorEvent

RecoverFn = Callable[[ErrorEvent], Union[bool, Awaitable[bool]]]


def assume_recovered(error: ErrorEvent) -> bool:
    return True


@dataclass(frozen=True)
class RecoveryStrategy:
    action: str
    recover: RecoverFn = assume_recovered


DEFAULT_STRATEGIES: dict[str, RecoveryStrategy] = {
    "Timeout": RecoveryStrategy("restart"),
    "ScreenDetectionFailed": RecoveryStrategy("new_screenshot"),
    "ControlFailed": RecoveryStrategy("alternative_control"),
}

FALLBACK_STRATEGY = RecoveryStrategy("wait_and_retry")


class RecoveryDispatcher:
    """Error type -> RecoveryStrategy lookup with a fallback."""

    def __init__(
        self,
        strategies: Mapping[str, RecoveryStrategy] | None = None,
        fallback: RecoveryStrategy | None = None,
    ):
        self._strategies = dict(DEFAULT_STRATEGIES if strategies is None else strategies)
        self.fallback = fallback or FALLBACK_STRATEGY

    def register(self, error_type: str, strategy: RecoveryStrategy) -> None:
        self._strategies[error_type] = strategy

    def strategy_for(self, error_type: str) -> RecoveryStrategy:
        return self._strategies.get(error_type, self.fallback)

    def actions(self) -> dict[str, str]:
        return {error_type: s.action for error_type, s in self._strategies.items()}

    def __contains__(self, error_type: object) -> bool:
        return error_type in self._strategies


__all__ = [
    "DEFAULT_STRATEGIES",
    "FALLBACK_STRATEGY",
    "RecoverFn",
    "RecoveryDispatcher",
    "RecoveryStrategy",
    "assume_recovered",
]
