"""Coordinate optimization pipeline.

Runs the accuracy, speed and time filters followed by Douglas-Peucker
simplification, recording how many points each stage removed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..efficiency import detect_idle_periods
from ..models import Position
from .douglas_peucker import simplify
from .filters import filter_by_accuracy, filter_by_speed, filter_by_time_interval
from .settings import AGGRESSIVE, BALANCED, OptimizationSettings

LOGGER = logging.getLogger(__name__)

POTENTIAL_TOLERANCES = (10.0, 25.0, 50.0)
# The tolerance-25 run decides the recommendation and the savings estimate.
REFERENCE_TOLERANCE = 25.0
FALLBACK_TOLERANCE = 10.0
RECOMMENDATION_MIN_REDUCTION = 30.0


@dataclass(slots=True)
class OptimizationStatistics:
    """Points removed by each stage, counted against that stage's input."""

    accuracy_filtered: int = 0
    speed_filtered: int = 0
    time_filtered: int = 0
    douglas_peucker_reduced: int = 0


@dataclass(slots=True)
class OptimizationResult:
    original_count: int
    optimized_count: int
    reduction_percentage: float
    statistics: OptimizationStatistics = field(default_factory=OptimizationStatistics)
    optimized_positions: List[Position] = field(default_factory=list)


@dataclass(slots=True)
class OptimizationPotential:
    """Reduction achievable at several tolerances, plus a recommendation."""

    total_positions: int = 0
    reductions: Dict[float, float] = field(default_factory=dict)
    recommended_tolerance: float = FALLBACK_TOLERANCE
    estimated_bandwidth_savings: int = 0
    estimated_storage_savings: int = 0


def optimize_coordinates(
    positions: Sequence[Position],
    settings: Optional[OptimizationSettings] = None,
) -> OptimizationResult:
    """Reduce a position stream to the points that preserve its shape.

    Stages run in a fixed order: accuracy filter, speed filter, time filter,
    then Douglas-Peucker. Disabled stages are skipped and report zero. The
    output is always a subsequence of ``positions`` that begins and ends with
    the original first and last points.

    Timestamps are expected to be non-decreasing; other inputs produce
    unspecified (but non-failing) output.
    """

    settings = settings or OptimizationSettings()
    original = list(positions)
    original_count = len(original)
    if original_count == 0:
        return OptimizationResult(0, 0, 0.0)
    if original_count == 1:
        return OptimizationResult(1, 1, 0.0, optimized_positions=original)

    stats = OptimizationStatistics()
    current = original

    if settings.enable_accuracy_filter:
        outcome = filter_by_accuracy(current, settings.min_accuracy)
        current, stats.accuracy_filtered = outcome.positions, outcome.removed
        LOGGER.debug("Accuracy filter removed %d positions", outcome.removed)

    if settings.enable_speed_filter:
        exempt: List[Position] = []
        if settings.preserve_stops:
            for period in detect_idle_periods(original):
                exempt.extend((period.start, period.end))
        outcome = filter_by_speed(current, settings.min_speed, exempt=exempt)
        current, stats.speed_filtered = outcome.positions, outcome.removed
        LOGGER.debug("Speed filter removed %d positions", outcome.removed)

    if settings.enable_time_filter:
        outcome = filter_by_time_interval(current, settings.min_time_interval)
        current, stats.time_filtered = outcome.positions, outcome.removed
        LOGGER.debug("Time filter removed %d positions", outcome.removed)

    current = _anchor_endpoints(original, current)

    before_simplify = len(current)
    current = simplify(
        current,
        settings.tolerance,
        preserve_stops=settings.preserve_stops,
        preserve_speed_changes=settings.preserve_speed_changes,
    )
    stats.douglas_peucker_reduced = before_simplify - len(current)

    optimized_count = len(current)
    reduction = round(100.0 * (1.0 - optimized_count / original_count), 1)
    LOGGER.info(
        "Optimized %d -> %d positions (%.1f%% reduction)",
        original_count,
        optimized_count,
        reduction,
    )
    return OptimizationResult(
        original_count=original_count,
        optimized_count=optimized_count,
        reduction_percentage=reduction,
        statistics=stats,
        optimized_positions=current,
    )


def quick_optimize(positions: Sequence[Position]) -> OptimizationResult:
    return optimize_coordinates(positions, BALANCED)


def aggressive_optimize(positions: Sequence[Position]) -> OptimizationResult:
    return optimize_coordinates(positions, AGGRESSIVE)


def _anchor_endpoints(
    original: Sequence[Position], filtered: List[Position]
) -> List[Position]:
    """Reinstate the original first/last positions if a filter removed them."""

    first, last = original[0], original[-1]
    anchored = list(filtered)
    if not anchored or anchored[0] is not first:
        anchored.insert(0, first)
    if anchored[-1] is not last:
        anchored.append(last)
    return anchored


def optimization_potential(
    positions: Sequence[Position],
    tolerances: Iterable[float] = POTENTIAL_TOLERANCES,
    settings: Optional[OptimizationSettings] = None,
) -> OptimizationPotential:
    """Run the pipeline at each tolerance and report the reductions.

    Tolerance 25 is recommended when it removes more than 30% of the
    positions, otherwise 10. Savings estimates are the tolerance-25 reduction
    rounded half up to a whole percentage. Empty input reports zeros.
    """

    settings = settings or OptimizationSettings()
    tolerance_list = [float(tol) for tol in tolerances]
    if not positions:
        return OptimizationPotential(reductions={tol: 0.0 for tol in tolerance_list})

    reductions = {
        tol: optimize_coordinates(
            positions, settings.updated(tolerance=tol)
        ).reduction_percentage
        for tol in tolerance_list
    }
    reference = reductions.get(REFERENCE_TOLERANCE)
    if reference is None:
        reference = optimize_coordinates(
            positions, settings.updated(tolerance=REFERENCE_TOLERANCE)
        ).reduction_percentage
    recommended = (
        REFERENCE_TOLERANCE
        if reference > RECOMMENDATION_MIN_REDUCTION
        else FALLBACK_TOLERANCE
    )
    savings = int(math.floor(reference + 0.5))
    LOGGER.info(
        "Optimization potential for %d positions: %s (recommended tolerance %.0f)",
        len(positions),
        ", ".join(f"{tol:g} m -> {pct:.1f}%" for tol, pct in reductions.items()),
        recommended,
    )
    return OptimizationPotential(
        total_positions=len(positions),
        reductions=reductions,
        recommended_tolerance=recommended,
        estimated_bandwidth_savings=savings,
        estimated_storage_savings=savings,
    )
