"""
probes.py - Host Probes

Optional, injected callables that read the host: CPU, memory, feature
availability, versions and the environment checks. Every probe is called
through ``safe_probe`` so a failing probe degrades to its fallback instead
of aborting the calling component.

Fallbacks when a probe is absent:
    cpu_usage            elapsed-time heuristic (benchmark-side)
    memory_info          psutil process RSS against system totals, else zeros
    host_runtime_version running Python version
    target_app_version   undetected (None)
    feature_available    built-in dispatch table, unknown names unavailable
    environment checks   False, with a warning
"""

from __future__ import annotations

import asyncio
import os
import platform
import shutil
import subprocess
import tempfile
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import psutil

from soakbench.config.logging import get_logger
from soakbench.core.errors import ProbeError
from soakbench.core.types import MemoryInfo

logger = get_logger("soakbench.probes")

T = TypeVar("T")


def safe_probe(name: str, fn: Callable[..., T] | None, fallback: T, *args: Any) -> T:
    """Call ``fn(*args)``; on absence return ``fallback``, on failure log and return it."""
    if fn is None:
        return fallback
    try:
        return fn(*args)
    except Exception as e:
        logger.warning("Host probe failed", probe=name, error=str(ProbeError(name, e)))
        return fallback


# =============================================================================
# psutil-backed readings
# =============================================================================


def _as_memory_info(value: Any) -> MemoryInfo:
    if isinstance(value, MemoryInfo):
        return value
    if isinstance(value, dict):
        return MemoryInfo.model_validate(value)
    return MemoryInfo(
        total=float(getattr(value, "total", 0) or 0),
        free=float(getattr(value, "free", 0) or 0),
        used=float(getattr(value, "used", 0) or 0),
    )


def system_memory_info() -> MemoryInfo:
    """System-wide virtual memory."""
    vm = psutil.virtual_memory()
    return MemoryInfo(total=float(vm.total), free=float(vm.available), used=float(vm.used))


def process_memory_info() -> MemoryInfo:
    """This process's RSS as ``used`` against system totals."""
    rss = psutil.Process(os.getpid()).memory_info().rss
    vm = psutil.virtual_memory()
    return MemoryInfo(total=float(vm.total), free=float(vm.available), used=float(rss))


def process_cpu_percent() -> float:
    """Process CPU percent since the previous call (non-blocking)."""
    return float(psutil.Process(os.getpid()).cpu_percent(interval=None))


# =============================================================================
# Built-in feature dispatch
# =============================================================================


def _has_asyncio() -> bool:
    return hasattr(asyncio, "get_running_loop")


def _has_threads() -> bool:
    t = threading.Thread(target=lambda: None, daemon=True)
    t.start()
    t.join(timeout=1.0)
    return not t.is_alive()


def _has_files() -> bool:
    return os.access(tempfile.gettempdir(), os.W_OK)


def _has_subprocess() -> bool:
    return hasattr(subprocess, "Popen") and (os.name == "nt" or shutil.which("sh") is not None)


def _has_psutil() -> bool:
    return psutil.cpu_count() is not None


FEATURE_CHECKS: dict[str, Callable[[], bool]] = {
    "asyncio": _has_asyncio,
    "threads": _has_threads,
    "files": _has_files,
    "subprocess": _has_subprocess,
    "psutil": _has_psutil,
}


def builtin_feature_available(name: str) -> bool:
    """Check a feature through the built-in dispatch; unknown names are unavailable."""
    check = FEATURE_CHECKS.get(name)
    if check is None:
        return False
    return bool(check())


def file_access_check(directory: str | None = None) -> bool:
    """Write, verify, read back and delete a probe file."""
    base = Path(directory) if directory else Path(tempfile.gettempdir())
    probe = base / f".soakbench-probe-{uuid.uuid4().hex}"
    payload = "soakbench file access probe"
    try:
        probe.write_text(payload, encoding="utf-8")
        if not probe.is_file():
            return False
        ok = probe.read_text(encoding="utf-8") == payload
        probe.unlink()
        return ok and not probe.exists()
    except OSError as e:
        logger.warning("File access check failed", path=str(probe), error=str(e))
        return False


# =============================================================================
# Probe set
# =============================================================================


@dataclass
class HostProbes:
    """Optional host probes; ``None`` means use the documented fallback."""

    cpu_usage: Callable[[], float] | None = None
    memory_info: Callable[[], Any] | None = None
    feature_available: Callable[[str], bool] | None = None
    target_app_version: Callable[[], str | None] | None = None
    host_runtime_version: Callable[[], str | None] | None = None
    screen_capture: Callable[[], bool] | None = None
    permissions_granted: Callable[[], bool] | None = None
    touch_simulation: Callable[[], bool] | None = None

    @classmethod
    def from_psutil(cls) -> HostProbes:
        """Probe set backed by psutil system CPU and virtual memory."""
        return cls(
            cpu_usage=lambda: float(psutil.cpu_percent(interval=None)),
            memory_info=system_memory_info,
            feature_available=builtin_feature_available,
            host_runtime_version=platform.python_version,
        )

    # -- readings with fallbacks ------------------------------------------

    def read_cpu(self) -> float | None:
        """CPU percent from the probe, or None when no probe is installed or it fails."""
        if self.cpu_usage is None:
            return None
        value = safe_probe("cpu_usage", self.cpu_usage, None)
        return float(value) if value is not None else None

    def read_memory(self) -> MemoryInfo | None:
        """Memory from the probe (None if it fails), else the process fallback."""
        if self.memory_info is None:
            return safe_probe("process_memory", process_memory_info, MemoryInfo())
        value = safe_probe("memory_info", self.memory_info, None)
        if value is None:
            return None
        try:
            return _as_memory_info(value)
        except (TypeError, ValueError) as e:
            logger.warning("Unusable memory probe value", error=str(e))
            return None

    def read_feature(self, name: str) -> bool:
        if self.feature_available is not None:
            return bool(safe_probe("feature_available", self.feature_available, False, name))
        return bool(safe_probe("feature_available", builtin_feature_available, False, name))

    def read_target_version(self) -> str | None:
        return safe_probe("target_app_version", self.target_app_version, None)

    def read_host_version(self) -> str | None:
        return safe_probe(
            "host_runtime_version",
            self.host_runtime_version or platform.python_version,
            None,
        )

    def read_check(self, name: str) -> bool:
        """Run one boolean environment-check probe; absent probes report False."""
        fn = getattr(self, name)
        if fn is None:
            logger.warning("No host probe installed for environment check", check=name)
            return False
        return bool(safe_probe(name, fn, False))


__all__ = [
    "FEATURE_CHECKS",
    "HostProbes",
    "builtin_feature_available",
    "file_access_check",
    "process_cpu_percent",
    "process_memory_info",
    "safe_probe",
    "system_memory_info",
]
