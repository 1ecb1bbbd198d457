"""Great-circle distance helpers shared by the optimizer and scorer."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .models import LatLon, Position

FloatArray = NDArray[np.float64]

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the Haversine distance between two points in kilometres.

    Invalid (NaN) inputs propagate to the result instead of raising.
    """

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_KM * c


def position_distance_km(start: Position, end: Position) -> float:
    return distance_km(start.latitude, start.longitude, end.latitude, end.longitude)


def cross_track_distances_m(
    lats: Sequence[float] | FloatArray,
    lons: Sequence[float] | FloatArray,
    start: LatLon,
    end: LatLon,
) -> FloatArray:
    """Distance in metres from each point to the great-circle arc ``start``-``end``.

    Points whose projection lies on the arc get their cross-track distance;
    points before the start or past the end get the distance to that endpoint.
    A degenerate arc (``start == end``) measures distance to ``start``.
    """

    phi = np.radians(np.asarray(lats, dtype=float))
    lam = np.radians(np.asarray(lons, dtype=float))
    if phi.size == 0:
        return np.empty(0, dtype=float)

    phi1, lam1 = math.radians(start[0]), math.radians(start[1])
    phi2, lam2 = math.radians(end[0]), math.radians(end[1])

    delta_13 = _angular_distance(phi1, lam1, phi, lam)
    delta_12 = float(_angular_distance(phi1, lam1, np.float64(phi2), np.float64(lam2)))
    if delta_12 == 0.0:
        return delta_13 * EARTH_RADIUS_M

    theta_13 = _bearing(phi1, lam1, phi, lam)
    theta_12 = float(_bearing(phi1, lam1, np.float64(phi2), np.float64(lam2)))
    d_theta = theta_13 - theta_12

    cross = np.arcsin(np.clip(np.sin(delta_13) * np.sin(d_theta), -1.0, 1.0))
    # Right spherical triangle: tan(along) = tan(delta_13) * cos(d_theta).
    along = np.arctan2(np.sin(delta_13) * np.cos(d_theta), np.cos(delta_13))

    delta_23 = _angular_distance(phi2, lam2, phi, lam)
    distances = np.where(
        along < 0.0,
        delta_13,
        np.where(along > delta_12, delta_23, np.abs(cross)),
    )
    return distances * EARTH_RADIUS_M


def _angular_distance(
    phi1: float, lam1: float, phi2: FloatArray, lam2: FloatArray
) -> FloatArray:
    a = (
        np.sin((phi2 - phi1) / 2.0) ** 2
        + math.cos(phi1) * np.cos(phi2) * np.sin((lam2 - lam1) / 2.0) ** 2
    )
    return 2.0 * np.arctan2(np.sqrt(a), np.sqrt(np.maximum(0.0, 1.0 - a)))


def _bearing(
    phi1: float, lam1: float, phi2: FloatArray, lam2: FloatArray
) -> FloatArray:
    d_lam = lam2 - lam1
    y = np.sin(d_lam) * np.cos(phi2)
    x = math.cos(phi1) * np.sin(phi2) - math.sin(phi1) * np.cos(phi2) * np.cos(d_lam)
    return np.arctan2(y, x)
