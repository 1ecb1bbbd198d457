"""Douglas-Peucker line simplification over geodesic position tracks."""

from __future__ import annotations

import logging
from typing import List, Sequence, Set

import numpy as np

from ..efficiency import detect_idle_periods
from ..geo import cross_track_distances_m
from ..models import Position

LOGGER = logging.getLogger(__name__)

# A change is significant when it exceeds both limits.
SPEED_CHANGE_RATIO = 0.5
SPEED_CHANGE_MIN_DELTA_KMH = 20.0


def douglas_peucker_indices(
    positions: Sequence[Position], tolerance_m: float
) -> List[int]:
    """Return sorted indices of the points kept by plain Douglas-Peucker.

    A point survives when its distance to the chord of the current span is
    strictly greater than ``tolerance_m``. Spans are processed from an
    explicit stack so long tracks cannot exhaust the interpreter stack.
    """

    count = len(positions)
    if count < 3:
        return list(range(count))

    lats = np.fromiter((p.latitude for p in positions), dtype=float, count=count)
    lons = np.fromiter((p.longitude for p in positions), dtype=float, count=count)
    keep = np.zeros(count, dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, count - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        distances = cross_track_distances_m(
            lats[first + 1 : last],
            lons[first + 1 : last],
            (lats[first], lons[first]),
            (lats[last], lons[last]),
        )
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance_m:
            split = first + 1 + offset
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))

    return [int(i) for i in np.flatnonzero(keep)]


def protected_indices(
    positions: Sequence[Position],
    *,
    preserve_stops: bool,
    preserve_speed_changes: bool,
) -> Set[int]:
    """Indices that must survive simplification regardless of deviation."""

    protected: Set[int] = set()
    if preserve_stops:
        index_of = {id(pos): i for i, pos in enumerate(positions)}
        for period in detect_idle_periods(positions):
            protected.add(index_of[id(period.start)])
            protected.add(index_of[id(period.end)])
    if preserve_speed_changes:
        for index, pos in enumerate(positions):
            if pos.harsh_acceleration or pos.harsh_braking:
                protected.add(index)
            elif index > 0 and _is_speed_change(positions[index - 1], pos):
                protected.add(index)
    return protected


def simplify(
    positions: Sequence[Position],
    tolerance_m: float,
    preserve_stops: bool = True,
    preserve_speed_changes: bool = True,
) -> List[Position]:
    """Simplify a track while keeping stop boundaries and speed changes.

    Plain Douglas-Peucker runs first; protected points are then merged back in
    at their original positions.
    """

    if len(positions) < 3:
        return list(positions)

    kept = set(douglas_peucker_indices(positions, tolerance_m))
    protected = protected_indices(
        positions,
        preserve_stops=preserve_stops,
        preserve_speed_changes=preserve_speed_changes,
    )
    LOGGER.debug(
        "Douglas-Peucker kept %d/%d points, %d protected",
        len(kept),
        len(positions),
        len(protected - kept),
    )
    return [positions[i] for i in sorted(kept | protected)]


def _is_speed_change(previous: Position, current: Position) -> bool:
    """True when speed moves by over 20 km/h and over half the larger speed.

    ``previous`` is the preceding position of the simplifier input, not the
    preceding kept point, so the protected set does not depend on tolerance.
    """

    prev_speed = previous.speed or 0.0
    curr_speed = current.speed or 0.0
    delta = abs(curr_speed - prev_speed)
    return (
        delta > SPEED_CHANGE_MIN_DELTA_KMH
        and delta > SPEED_CHANGE_RATIO * max(prev_speed, curr_speed)
    )
