"""Global pytest fixtures & helpers.

Adds project root to path and provides position factories shared by the
optimization, efficiency and export tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from fleet_trajectory.models import Position

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


# --- Factory helpers -------------------------------------------------
def make_position(seconds=0.0, lat=0.0, lon=0.0, speed=50.0, **kwargs):
    return Position(
        timestamp=T0 + timedelta(seconds=seconds),
        latitude=lat,
        longitude=lon,
        speed=speed,
        **kwargs,
    )


def make_track(coords, step_s=60.0, speed=50.0):
    return [
        make_position(idx * step_s, lat, lon, speed=speed)
        for idx, (lat, lon) in enumerate(coords)
    ]


def make_idle_run(count, step_s=60.0, lat=51.5, lon=-0.12):
    return [make_position(idx * step_s, lat, lon, speed=0.0) for idx in range(count)]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def collinear_track():
    return make_track([(0.0, float(lon)) for lon in range(5)])


@pytest.fixture
def zigzag_track():
    # ~1.1 km north-south swings while heading east.
    coords = [(0.01 * (idx % 2), 0.01 * idx) for idx in range(12)]
    return make_track(coords)


@pytest.fixture
def city_trip():
    """Drive, stop for 10 minutes, drive on with a harsh brake."""

    positions = []
    seconds = 0.0
    for idx in range(10):
        positions.append(
            make_position(seconds, 51.50 + 0.002 * idx, -0.12, speed=45.0, fuel_level=80.0 - idx * 0.1)
        )
        seconds += 40.0
    stop_lat = positions[-1].latitude
    for _ in range(11):
        positions.append(make_position(seconds, stop_lat, -0.12, speed=0.0, fuel_level=79.0))
        seconds += 60.0
    for idx in range(1, 10):
        positions.append(
            make_position(
                seconds,
                stop_lat,
                -0.12 + 0.003 * idx,
                speed=55.0,
                fuel_level=79.0 - idx * 0.2,
                harsh_braking=(idx == 5),
            )
        )
        seconds += 40.0
    return positions
