"""Trip analysis combining optimization and efficiency scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import IDLE_THRESHOLD_MINUTES
from .efficiency import (
    EfficiencySegment,
    EfficiencyStats,
    FuelSummary,
    IdlePeriod,
    aggregate_stats,
    detect_idle_periods,
    process_segments,
    summarize_fuel,
)
from .models import Position
from .optimization import OptimizationResult, OptimizationSettings, optimize_coordinates


@dataclass(slots=True)
class TripAnalysis:
    optimization: OptimizationResult
    segments: List[EfficiencySegment]
    stats: EfficiencyStats
    idle_periods: List[IdlePeriod]
    fuel: FuelSummary


def analyze_trip(
    positions: Sequence[Position],
    settings: Optional[OptimizationSettings] = None,
    idle_threshold_minutes: float = IDLE_THRESHOLD_MINUTES,
) -> TripAnalysis:
    """Optimize a trip and score it the way the replay view does.

    Segments are scored over the optimized track; idle periods and the fuel
    summary use the raw stream so short stops are not lost to filtering.
    """

    optimization = optimize_coordinates(positions, settings)
    segments = process_segments(optimization.optimized_positions)
    return TripAnalysis(
        optimization=optimization,
        segments=segments,
        stats=aggregate_stats(segments),
        idle_periods=detect_idle_periods(positions, idle_threshold_minutes),
        fuel=summarize_fuel(positions),
    )
