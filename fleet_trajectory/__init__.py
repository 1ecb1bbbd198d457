"""Fleet trajectory optimization and driving efficiency toolkit."""

from .analysis import TripAnalysis, analyze_trip
from .efficiency import (
    EfficiencySegment,
    EfficiencyStats,
    IdlePeriod,
    aggregate_stats,
    detect_idle_periods,
    process_segments,
    score_segment,
)
from .errors import PositionFormatError, TraccarAPIError
from .geo import distance_km
from .models import Position
from .optimization import (
    OptimizationResult,
    OptimizationSettings,
    get_preset,
    optimize_coordinates,
)

__all__ = [
    "Position",
    "distance_km",
    "OptimizationResult",
    "OptimizationSettings",
    "get_preset",
    "optimize_coordinates",
    "EfficiencySegment",
    "EfficiencyStats",
    "IdlePeriod",
    "aggregate_stats",
    "detect_idle_periods",
    "process_segments",
    "score_segment",
    "TripAnalysis",
    "analyze_trip",
    "PositionFormatError",
    "TraccarAPIError",
]
