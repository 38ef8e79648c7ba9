"""Race a test function against its deadline."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from soakbench.config.logging import get_logger

logger = get_logger("soakbench.runner")

TestFunction = Callable[[], Any]


def timeout_message(timeout_ms: float) -> str:
    value = int(timeout_ms) if float(timeout_ms).is_integer() else timeout_ms
    return f"Test timed out after {value}ms"


def describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def invoke(fn: TestFunction) -> Any:
    """Call ``fn``; await the result when it is awaitable."""
    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result


def _drain_late(task: asyncio.Task) -> None:
    # A timed-out case may still settle; retrieve its exception so the loop
    # does not report it as never retrieved.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late failure after timeout", error=describe_error(exc))


async def race(fn: TestFunction, timeout_ms: float, *, cancel_on_timeout: bool = False) -> str | None:
    """Run ``fn`` against a ``timeout_ms`` deadline.

    Returns None when ``fn`` completes first, otherwise the failure message.
    On timeout the work keeps running unless ``cancel_on_timeout`` is set;
    only the recording of its outcome is abandoned.
    """
    task = asyncio.ensure_future(invoke(fn))
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)

    if not done:
        if cancel_on_timeout:
            task.cancel()
        task.add_done_callback(_drain_late)
        return timeout_message(timeout_ms)

    if task.cancelled():
        return "Test was cancelled"
    exc = task.exception()
    if exc is not None:
        return describe_error(exc)
    return None


__all__ = ["TestFunction", "describe_error", "invoke", "race", "timeout_message"]
