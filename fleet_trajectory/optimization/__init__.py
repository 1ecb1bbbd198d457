"""GPS trajectory optimization: filters, simplification and the pipeline."""

from .douglas_peucker import douglas_peucker_indices, protected_indices, simplify
from .filters import (
    FilterOutcome,
    filter_by_accuracy,
    filter_by_speed,
    filter_by_time_interval,
)
from .optimizer import (
    OptimizationPotential,
    OptimizationResult,
    OptimizationStatistics,
    aggressive_optimize,
    optimization_potential,
    optimize_coordinates,
    quick_optimize,
)
from .performance import PerformanceData, PerformanceTracker
from .settings import (
    OPTIMIZATION_PRESETS,
    OptimizationSettings,
    get_preset,
    get_preset_names,
)

__all__ = [
    "FilterOutcome",
    "filter_by_accuracy",
    "filter_by_speed",
    "filter_by_time_interval",
    "douglas_peucker_indices",
    "protected_indices",
    "simplify",
    "OptimizationResult",
    "OptimizationPotential",
    "OptimizationStatistics",
    "optimize_coordinates",
    "quick_optimize",
    "aggressive_optimize",
    "optimization_potential",
    "PerformanceData",
    "PerformanceTracker",
    "OPTIMIZATION_PRESETS",
    "OptimizationSettings",
    "get_preset",
    "get_preset_names",
]
