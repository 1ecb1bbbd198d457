"""Driving efficiency scoring for replayed position streams.

Each consecutive pair of positions forms a segment scored from 0 to 100.
Harsh events, speeding, idling and fuel usage adjust a perfect starting
score; segments are then summarised into trip-level statistics. The module
also finds idle periods (long stationary runs) and summarises fuel readings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import IDLE_THRESHOLD_MINUTES
from .geo import position_distance_km
from .models import Position, elapsed_minutes

# Speed thresholds (km/h).
EXCESSIVE_SPEED_KMH = 100.0
IDLE_SPEED_KMH = 3.0

# Idle duration (minutes) above which a stop is flagged as significant.
SIGNIFICANT_IDLE_MINUTES = 15.0

# Scoring weights.
HARSH_ACCELERATION_PENALTY = 30.0
HARSH_BRAKING_PENALTY = 30.0
EXCESSIVE_SPEED_PENALTY_PER_KMH = 2.0
IDLING_PENALTY_PER_MINUTE = 1.0
FUEL_EFFICIENCY_ADJUSTMENT = 10.0

# Fuel efficiency bounds (km per percent of tank).
GOOD_FUEL_EFFICIENCY = 2.0
POOR_FUEL_EFFICIENCY = 0.5

# Fuel level rise (percent) treated as a refuel.
REFUEL_THRESHOLD = 5.0

EXCELLENT_SCORE = 80.0
GOOD_SCORE = 60.0
FAIR_SCORE = 40.0

# (minimum score, label, colour), checked in order.
_SCORE_BANDS = (
    (EXCELLENT_SCORE, "Excellent", "#10B981"),
    (GOOD_SCORE, "Good", "#F59E0B"),
    (FAIR_SCORE, "Fair", "#F97316"),
)
_POOR_BAND = ("Poor", "#EF4444")


@dataclass(slots=True)
class EfficiencyFactors:
    """Which scoring rules fired for a segment."""

    harsh_acceleration: bool = False
    harsh_braking: bool = False
    excessive_speed: bool = False
    idling: bool = False
    fuel_consumption: float = 0.0


@dataclass(slots=True)
class EfficiencySegment:
    start: Position
    end: Position
    score: float
    color: str
    label: str
    distance_km: float
    duration_minutes: float
    average_speed_kmh: float
    factors: EfficiencyFactors


@dataclass(slots=True)
class IdlePeriod:
    """Stationary run long enough to report."""

    start: Position
    end: Position
    duration_minutes: float
    latitude: float
    longitude: float
    address: Optional[str]
    is_significant: bool


@dataclass(slots=True)
class ScoreDistribution:
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


@dataclass(slots=True)
class EfficiencyStats:
    """Trip-level summary of a list of segments."""

    average_score: float = 0.0
    total_distance_km: float = 0.0
    total_duration_minutes: float = 0.0
    average_speed_kmh: float = 0.0
    harsh_events: int = 0
    idle_time_minutes: float = 0.0
    fuel_efficiency: float = 0.0
    score_distribution: ScoreDistribution = field(default_factory=ScoreDistribution)


@dataclass(slots=True)
class FuelSummary:
    total_fuel_used: float = 0.0
    average_fuel_level: float = 0.0
    refuel_events: int = 0
    fuel_efficiency: float = 0.0


@dataclass(slots=True)
class _SegmentMetrics:
    distance_km: float
    duration_minutes: float
    average_speed_kmh: float


def _segment_metrics(start: Position, end: Position) -> _SegmentMetrics:
    distance = position_distance_km(start, end)
    duration = elapsed_minutes(start, end)
    average_speed = distance / duration * 60.0 if duration > 0 else 0.0
    return _SegmentMetrics(distance, duration, average_speed)


def _is_idling(metrics: _SegmentMetrics) -> bool:
    return metrics.average_speed_kmh < IDLE_SPEED_KMH and metrics.duration_minutes > 1


def _fuel_used(start: Position, end: Position) -> Optional[float]:
    if start.fuel_level is None or end.fuel_level is None:
        return None
    return start.fuel_level - end.fuel_level


def score_segment(start: Position, end: Position) -> float:
    """Return the efficiency score (0-100) for the move from ``start`` to ``end``."""

    metrics = _segment_metrics(start, end)
    score = 100.0

    if end.harsh_acceleration:
        score -= HARSH_ACCELERATION_PENALTY
    if end.harsh_braking:
        score -= HARSH_BRAKING_PENALTY

    if metrics.average_speed_kmh > EXCESSIVE_SPEED_KMH:
        score -= (
            metrics.average_speed_kmh - EXCESSIVE_SPEED_KMH
        ) * EXCESSIVE_SPEED_PENALTY_PER_KMH

    if _is_idling(metrics):
        score -= metrics.duration_minutes * IDLING_PENALTY_PER_MINUTE

    fuel_used = _fuel_used(start, end)
    if fuel_used is not None and fuel_used > 0 and metrics.distance_km > 0:
        fuel_efficiency = metrics.distance_km / fuel_used
        if fuel_efficiency > GOOD_FUEL_EFFICIENCY:
            score += FUEL_EFFICIENCY_ADJUSTMENT
        elif fuel_efficiency < POOR_FUEL_EFFICIENCY:
            score -= FUEL_EFFICIENCY_ADJUSTMENT

    return max(0.0, min(100.0, score))


def efficiency_color(score: float) -> str:
    for threshold, _, color in _SCORE_BANDS:
        if score >= threshold:
            return color
    return _POOR_BAND[1]


def efficiency_label(score: float) -> str:
    for threshold, label, _ in _SCORE_BANDS:
        if score >= threshold:
            return label
    return _POOR_BAND[0]


def process_segments(positions: Sequence[Position]) -> List[EfficiencySegment]:
    """Score every consecutive pair of positions, in order."""

    segments: List[EfficiencySegment] = []
    for start, end in zip(positions, positions[1:]):
        metrics = _segment_metrics(start, end)
        score = score_segment(start, end)
        fuel_used = _fuel_used(start, end)
        factors = EfficiencyFactors(
            harsh_acceleration=bool(end.harsh_acceleration),
            harsh_braking=bool(end.harsh_braking),
            excessive_speed=metrics.average_speed_kmh > EXCESSIVE_SPEED_KMH,
            idling=_is_idling(metrics),
            fuel_consumption=fuel_used if fuel_used is not None else 0.0,
        )
        segments.append(
            EfficiencySegment(
                start=start,
                end=end,
                score=score,
                color=efficiency_color(score),
                label=efficiency_label(score),
                distance_km=metrics.distance_km,
                duration_minutes=metrics.duration_minutes,
                average_speed_kmh=metrics.average_speed_kmh,
                factors=factors,
            )
        )
    return segments


def detect_idle_periods(
    positions: Sequence[Position],
    idle_threshold_minutes: float = IDLE_THRESHOLD_MINUTES,
) -> List[IdlePeriod]:
    """Find stationary runs lasting at least ``idle_threshold_minutes``.

    A pair of consecutive positions is stationary when both report a speed
    below the idle speed. A run still open at the final pair is closed there.
    """

    periods: List[IdlePeriod] = []
    idle_start: Optional[Position] = None
    last_pair = len(positions) - 2

    for index in range(len(positions) - 1):
        current = positions[index]
        following = positions[index + 1]
        stationary = (current.speed or 0.0) < IDLE_SPEED_KMH and (
            following.speed or 0.0
        ) < IDLE_SPEED_KMH

        if stationary and idle_start is None:
            idle_start = current

        if idle_start is not None and (not stationary or index == last_pair):
            idle_end = following if stationary else current
            duration = elapsed_minutes(idle_start, idle_end)
            if duration >= idle_threshold_minutes:
                periods.append(
                    IdlePeriod(
                        start=idle_start,
                        end=idle_end,
                        duration_minutes=duration,
                        latitude=idle_start.latitude,
                        longitude=idle_start.longitude,
                        address=idle_start.address,
                        is_significant=duration >= SIGNIFICANT_IDLE_MINUTES,
                    )
                )
            idle_start = None

    return periods


def aggregate_stats(segments: Sequence[EfficiencySegment]) -> EfficiencyStats:
    """Summarise scored segments; an empty input yields a zeroed summary."""

    if not segments:
        return EfficiencyStats()

    total_distance = sum(seg.distance_km for seg in segments)
    total_duration = sum(seg.duration_minutes for seg in segments)
    average_speed = total_distance / total_duration * 60.0 if total_duration > 0 else 0.0
    average_score = sum(seg.score for seg in segments) / len(segments)
    harsh_events = sum(
        int(seg.factors.harsh_acceleration) + int(seg.factors.harsh_braking)
        for seg in segments
    )
    idle_time = sum(seg.duration_minutes for seg in segments if seg.factors.idling)
    total_fuel_used = sum(seg.factors.fuel_consumption for seg in segments)
    fuel_efficiency = total_distance / total_fuel_used if total_fuel_used > 0 else 0.0

    distribution = ScoreDistribution()
    for seg in segments:
        if seg.score >= EXCELLENT_SCORE:
            distribution.excellent += 1
        elif seg.score >= GOOD_SCORE:
            distribution.good += 1
        elif seg.score >= FAIR_SCORE:
            distribution.fair += 1
        else:
            distribution.poor += 1

    return EfficiencyStats(
        average_score=average_score,
        total_distance_km=total_distance,
        total_duration_minutes=total_duration,
        average_speed_kmh=average_speed,
        harsh_events=harsh_events,
        idle_time_minutes=idle_time,
        fuel_efficiency=fuel_efficiency,
        score_distribution=distribution,
    )


def summarize_fuel(positions: Sequence[Position]) -> FuelSummary:
    """Summarise fuel usage from positions carrying a fuel level.

    Drops between consecutive readings count as consumption and rises above
    the refuel threshold count as refuel events. Distance covers the whole
    stream, including positions without a fuel reading.
    """

    readings = [pos.fuel_level for pos in positions if pos.fuel_level is not None]
    if len(readings) < 2:
        return FuelSummary()

    total_used = 0.0
    refuels = 0
    for previous, current in zip(readings, readings[1:]):
        change = current - previous
        if change > REFUEL_THRESHOLD:
            refuels += 1
        elif change < 0:
            total_used += -change

    total_distance = sum(
        position_distance_km(a, b) for a, b in zip(positions, positions[1:])
    )
    return FuelSummary(
        total_fuel_used=total_used,
        average_fuel_level=sum(readings) / len(readings),
        refuel_events=refuels,
        fuel_efficiency=total_distance / total_used if total_used > 0 else 0.0,
    )
