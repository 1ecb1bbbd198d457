"""Caller-owned running statistics about past optimizations."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from .optimizer import OptimizationResult


@dataclass(slots=True)
class PerformanceData:
    total_optimizations: int = 0
    average_reduction: float = 0.0
    total_bandwidth_saved: float = 0.0
    last_optimization: Optional[OptimizationResult] = None


class PerformanceTracker:
    """Accumulate reduction percentages across optimization runs.

    The pipeline itself never touches this object; callers record results
    explicitly. Safe to share between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data = PerformanceData()

    def record(self, result: OptimizationResult) -> PerformanceData:
        """Fold ``result`` into the running averages and return a snapshot."""

        with self._lock:
            previous = self._data
            total = previous.total_optimizations + 1
            average = (
                previous.average_reduction * previous.total_optimizations
                + result.reduction_percentage
            ) / total
            self._data = PerformanceData(
                total_optimizations=total,
                average_reduction=average,
                total_bandwidth_saved=previous.total_bandwidth_saved
                + result.reduction_percentage,
                last_optimization=result,
            )
            return self._copy()

    def snapshot(self) -> PerformanceData:
        with self._lock:
            return self._copy()

    def _copy(self) -> PerformanceData:
        data = self._data
        return PerformanceData(
            data.total_optimizations,
            data.average_reduction,
            data.total_bandwidth_saved,
            data.last_optimization,
        )

    def reset(self) -> None:
        with self._lock:
            self._data = PerformanceData()
