"""soakbench.benchmark - Performance Benchmark."""

from __future__ import annotations

from .performance import FRAME_WINDOW_S, PerformanceBenchmark, summarize

__all__ = ["FRAME_WINDOW_S", "PerformanceBenchmark", "summarize"]
