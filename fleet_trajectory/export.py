"""Export helpers for optimized tracks (records, encoded polyline, GeoJSON)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from polyline import encode as polyline_encode
from shapely.geometry import LineString, Point, mapping

from .models import Position
from .optimization import OptimizationPotential, OptimizationResult
from .utils import normalise_value


def position_to_record(position: Position) -> Dict[str, Any]:
    """Return ``position`` as a JSON-friendly camelCase dict."""

    return {
        "deviceTime": position.timestamp.isoformat(),
        "latitude": position.latitude,
        "longitude": position.longitude,
        "speed": position.speed,
        "accuracy": position.accuracy,
        "fuelLevel": position.fuel_level,
        "harshAcceleration": position.harsh_acceleration,
        "harshBraking": position.harsh_braking,
        "address": position.address,
        "deviceId": position.device_id,
        "id": position.position_id,
    }


def positions_to_records(positions: Sequence[Position]) -> List[Dict[str, Any]]:
    return [position_to_record(pos) for pos in positions]


def result_to_dict(result: OptimizationResult) -> Dict[str, Any]:
    stats = result.statistics
    return {
        "originalCount": result.original_count,
        "optimizedCount": result.optimized_count,
        "reductionPercentage": result.reduction_percentage,
        "statistics": {
            "accuracyFiltered": stats.accuracy_filtered,
            "speedFiltered": stats.speed_filtered,
            "timeFiltered": stats.time_filtered,
            "douglasPeuckerReduced": stats.douglas_peucker_reduced,
        },
        "optimizedPositions": positions_to_records(result.optimized_positions),
    }


def potential_to_dict(potential: OptimizationPotential) -> Dict[str, Any]:
    return {
        "totalPositions": potential.total_positions,
        "optimizationPotential": {
            f"withTolerance{tol:g}": pct for tol, pct in potential.reductions.items()
        },
        "recommendations": {
            "recommendedTolerance": potential.recommended_tolerance,
            "estimatedBandwidthSavings": potential.estimated_bandwidth_savings,
            "estimatedStorageSavings": potential.estimated_storage_savings,
        },
    }


def encode_polyline(positions: Sequence[Position], precision: int = 5) -> str:
    """Encode the track as a Google encoded polyline string."""

    if not positions:
        return ""
    return polyline_encode([pos.latlon for pos in positions], precision)


def to_geojson_feature(
    positions: Sequence[Position],
    properties: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the track as a GeoJSON Feature (coordinates in lon/lat order).

    Two or more points give a LineString, a single point a Point, and an empty
    track a feature with a null geometry.
    """

    coords = [(pos.longitude, pos.latitude) for pos in positions]
    geometry: Optional[Dict[str, Any]]
    if len(coords) >= 2:
        geometry = normalise_value(dict(mapping(LineString(coords))))
    elif coords:
        geometry = normalise_value(dict(mapping(Point(coords[0]))))
    else:
        geometry = None
    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": normalise_value(dict(properties or {})),
    }
