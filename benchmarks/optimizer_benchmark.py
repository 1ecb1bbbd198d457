"""Benchmark the coordinate optimization pipeline with large point counts."""

from __future__ import annotations

import argparse
import math
import statistics
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Late imports rely on the adjusted sys.path above.
from fleet_trajectory.efficiency import (  # noqa: E402
    aggregate_stats,
    process_segments,
)
from fleet_trajectory.models import Position  # noqa: E402
from fleet_trajectory.optimization import (  # noqa: E402
    get_preset,
    get_preset_names,
    optimize_coordinates,
)


@dataclass(slots=True)
class StageDurations:
    """Timing measurements (in seconds) for one optimize + score run."""

    optimize: float
    scoring: float

    @property
    def total(self) -> float:
        return self.optimize + self.scoring


@dataclass(slots=True)
class BenchmarkSummary:
    """Aggregated statistics for multiple benchmark iterations."""

    point_count: int
    iterations: int
    optimized_count: int
    mean_optimize_ms: float
    mean_scoring_ms: float
    mean_total_ms: float
    worst_total_ms: float


def _build_track(point_count: int) -> List[Position]:
    """Generate a winding track sampled every 5 seconds."""

    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    base_lat = 51.5
    base_lon = -0.12
    return [
        Position(
            timestamp=start + timedelta(seconds=5 * idx),
            latitude=base_lat + idx * 1.0e-4,
            longitude=base_lon + 2.0e-3 * math.sin(idx / 50.0),
            speed=40.0 + 20.0 * math.sin(idx / 30.0),
            accuracy=10.0,
        )
        for idx in range(point_count)
    ]


def _run_iteration(track: List[Position], preset: str) -> tuple[StageDurations, int]:
    settings = get_preset(preset)

    start = time.perf_counter()
    result = optimize_coordinates(track, settings)
    optimize = time.perf_counter() - start

    start = time.perf_counter()
    stats = aggregate_stats(process_segments(result.optimized_positions))
    _ = stats
    scoring = time.perf_counter() - start

    return StageDurations(optimize=optimize, scoring=scoring), result.optimized_count


def run_benchmark(point_count: int, iterations: int, preset: str) -> BenchmarkSummary:
    """Benchmark the pipeline and return aggregated timings."""

    if point_count < 3:
        raise ValueError("point_count must be at least 3")
    if iterations <= 0:
        raise ValueError("iterations must be positive")

    track = _build_track(point_count)
    durations: List[StageDurations] = []
    optimized_count = 0
    for _ in range(iterations):
        duration, optimized_count = _run_iteration(track, preset)
        durations.append(duration)

    return BenchmarkSummary(
        point_count=point_count,
        iterations=iterations,
        optimized_count=optimized_count,
        mean_optimize_ms=statistics.fmean(d.optimize for d in durations) * 1000.0,
        mean_scoring_ms=statistics.fmean(d.scoring for d in durations) * 1000.0,
        mean_total_ms=statistics.fmean(d.total for d in durations) * 1000.0,
        worst_total_ms=max(d.total for d in durations) * 1000.0,
    )


def _format_summary(summary: BenchmarkSummary) -> Dict[str, float]:
    return {
        "point_count": summary.point_count,
        "iterations": summary.iterations,
        "optimized_count": summary.optimized_count,
        "mean_optimize_ms": summary.mean_optimize_ms,
        "mean_scoring_ms": summary.mean_scoring_ms,
        "mean_total_ms": summary.mean_total_ms,
        "worst_total_ms": summary.worst_total_ms,
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark trajectory optimization on a synthetic track",
    )
    parser.add_argument(
        "--points",
        type=int,
        default=20000,
        help="Number of positions in the synthetic track",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of repetitions for averaging",
    )
    parser.add_argument(
        "--preset",
        choices=get_preset_names(),
        default="balanced",
    )
    return parser.parse_args()


def main() -> None:
    """Entry point when running the module as a script."""

    args = _parse_args()
    summary = run_benchmark(args.points, args.iterations, args.preset)
    for key, value in _format_summary(summary).items():
        if key in {"point_count", "iterations", "optimized_count"}:
            print(f"{key}: {value}")
        else:
            print(f"{key}: {value:.3f}")


if __name__ == "__main__":
    main()
