import threading

import pytest

from fleet_trajectory.optimization import OptimizationResult, PerformanceTracker


def _result(reduction: float) -> OptimizationResult:
    return OptimizationResult(original_count=100, optimized_count=100 - int(reduction), reduction_percentage=reduction)


def test_tracker_starts_empty() -> None:
    snapshot = PerformanceTracker().snapshot()
    assert snapshot.total_optimizations == 0
    assert snapshot.average_reduction == 0.0
    assert snapshot.last_optimization is None


def test_tracker_keeps_running_average() -> None:
    tracker = PerformanceTracker()
    tracker.record(_result(60.0))
    last = _result(20.0)
    snapshot = tracker.record(last)
    assert snapshot.total_optimizations == 2
    assert snapshot.average_reduction == pytest.approx(40.0)
    assert snapshot.total_bandwidth_saved == pytest.approx(80.0)
    assert snapshot.last_optimization is last


def test_snapshots_are_detached_from_tracker_state() -> None:
    tracker = PerformanceTracker()
    first = tracker.record(_result(10.0))
    tracker.record(_result(30.0))
    assert first.total_optimizations == 1
    tracker.reset()
    assert tracker.snapshot().total_optimizations == 0


def test_tracker_is_thread_safe() -> None:
    tracker = PerformanceTracker()

    def worker() -> None:
        for _ in range(200):
            tracker.record(_result(50.0))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    snapshot = tracker.snapshot()
    assert snapshot.total_optimizations == 800
    assert snapshot.average_reduction == pytest.approx(50.0)
