"""Dataclasses describing vehicle position reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Position:
    """Single GPS report for a vehicle.

    Timestamps must be non-decreasing within a stream; this is not checked.
    Optional fields left as ``None`` mean "unknown" and never cause a stage to
    fail.
    """

    timestamp: datetime
    latitude: float
    longitude: float
    speed: float = 0.0
    accuracy: float | None = None
    fuel_level: float | None = None
    harsh_acceleration: bool | None = None
    harsh_braking: bool | None = None
    address: str | None = None
    device_id: int | None = None
    position_id: int | None = None

    @property
    def latlon(self) -> LatLon:
        return (self.latitude, self.longitude)


def elapsed_ms(start: Position, end: Position) -> float:
    """Milliseconds between two positions (negative if out of order)."""

    return (end.timestamp - start.timestamp).total_seconds() * 1000.0


def elapsed_minutes(start: Position, end: Position) -> float:
    return (end.timestamp - start.timestamp).total_seconds() / 60.0


PositionList = List[Position]
