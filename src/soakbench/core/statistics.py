"""Descriptive statistics over sample series."""

from __future__ import annotations

from collections.abc import Iterable

from .types import Sample, Statistics


def calculate_statistics(values: Iterable[float]) -> Statistics:
    """Compute min/max/avg/median.

    An empty series yields all zeros. The median is the upper-middle element
    of the sorted values (``sorted[n // 2]``), so ``[1, 2, 3, 4]`` has median 3.
    """
    data = [float(v) for v in values]
    if not data:
        return Statistics()

    ordered = sorted(data)
    return Statistics(
        min=ordered[0],
        max=ordered[-1],
        avg=sum(data) / len(data),
        median=ordered[len(ordered) // 2],
    )


def series_statistics(series: Iterable[Sample]) -> Statistics:
    """Statistics over the ``value`` field of a sample series snapshot."""
    return calculate_statistics(s.value for s in series)


__all__ = ["calculate_statistics", "series_statistics"]
