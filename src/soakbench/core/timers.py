"""Periodic and one-shot timers on the running asyncio loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import suppress

from soakbench.config.logging import get_logger

from .errors import HarnessStateError

logger = get_logger("soakbench.timers")


def require_running_loop(component: str) -> asyncio.AbstractEventLoop:
    """Return the running loop or raise HarnessStateError."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise HarnessStateError(
            f"{component} must be started from within a running event loop"
        ) from None


class PeriodicTask:
    """Invoke ``callback`` every ``interval_s`` seconds until cancelled.

    ``cancel()`` is synchronous: once it returns the callback never runs
    again, even if the next tick was already due on the loop.
    """

    def __init__(self, name: str, interval_s: float, callback: Callable[[], None]):
        self.name = name
        self.interval_s = interval_s
        self.callback = callback
        self._task: asyncio.Task | None = None
        self._cancelled = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._cancelled

    def start(self) -> None:
        loop = require_running_loop(self.name)
        self._cancelled = False
        self._task = loop.create_task(self._run(), name=f"soakbench:{self.name}")

    async def _run(self) -> None:
        while not self._cancelled:
            await asyncio.sleep(self.interval_s)
            if self._cancelled:
                break
            try:
                self.callback()
            except Exception:
                logger.warning("Periodic callback failed", timer=self.name, exc_info=True)

    def cancel(self) -> None:
        self._cancelled = True
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        if task.done():
            with suppress(asyncio.CancelledError):
                task.result()


class Deadline:
    """One-shot timer built on ``loop.call_later``."""

    def __init__(self, name: str, delay_s: float, callback: Callable[[], None]):
        self.name = name
        self.delay_s = delay_s
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    def start(self) -> None:
        loop = require_running_loop(self.name)
        self._handle = loop.call_later(self.delay_s, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self.callback()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = ["Deadline", "PeriodicTask", "require_running_loop"]
