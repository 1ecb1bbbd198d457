"""Filters for cleaning raw position streams before simplification.

Every filter preserves the relative order of the positions it keeps and
reports how many it removed so the optimizer can build its statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Sequence

from ..models import Position, elapsed_ms


@dataclass(slots=True)
class FilterOutcome:
    """Positions kept by a filter plus the number it discarded."""

    positions: List[Position]
    removed: int = 0


def filter_by_accuracy(
    positions: Sequence[Position], min_accuracy: float = 100.0
) -> FilterOutcome:
    """Drop fixes whose reported accuracy radius exceeds ``min_accuracy``.

    Positions without an accuracy value are always kept.
    """

    kept = [
        pos
        for pos in positions
        if pos.accuracy is None or not pos.accuracy > min_accuracy
    ]
    return FilterOutcome(kept, len(positions) - len(kept))


def filter_by_speed(
    positions: Sequence[Position],
    min_speed: float = 5.0,
    exempt: Collection[Position] = (),
) -> FilterOutcome:
    """Drop positions slower than ``min_speed``.

    ``exempt`` lists positions (matched by identity) that must survive
    regardless of speed, e.g. the boundaries of idle periods.
    """

    exempt_ids = {id(pos) for pos in exempt}
    kept = [
        pos
        for pos in positions
        if _speed(pos) >= min_speed or id(pos) in exempt_ids
    ]
    return FilterOutcome(kept, len(positions) - len(kept))


def filter_by_time_interval(
    positions: Sequence[Position], min_time_interval_ms: float = 30_000
) -> FilterOutcome:
    """Thin out positions reported closer together than ``min_time_interval_ms``.

    Spacing is measured against the last *kept* position. The first and last
    positions of the stream are never removed.
    """

    if len(positions) <= 2:
        return FilterOutcome(list(positions), 0)

    last_index = len(positions) - 1
    kept = [positions[0]]
    for index in range(1, last_index):
        current = positions[index]
        if elapsed_ms(kept[-1], current) < min_time_interval_ms:
            continue
        kept.append(current)
    kept.append(positions[last_index])
    return FilterOutcome(kept, len(positions) - len(kept))


def _speed(position: Position) -> float:
    return position.speed or 0.0
