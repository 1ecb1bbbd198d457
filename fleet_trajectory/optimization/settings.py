"""Optimization settings and the named presets offered to callers."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping

from .. import config


@dataclass(frozen=True, slots=True)
class OptimizationSettings:
    """Tuning knobs for :func:`optimize_coordinates`.

    ``max_speed`` is informational only; no filter stage rejects positions
    above it.
    """

    tolerance: float = config.OPTIMIZATION_TOLERANCE_M
    min_speed: float = config.OPTIMIZATION_MIN_SPEED_KMH
    min_time_interval: float = config.OPTIMIZATION_MIN_TIME_INTERVAL_MS
    max_speed: float = config.OPTIMIZATION_MAX_SPEED_KMH
    min_accuracy: float = config.OPTIMIZATION_MIN_ACCURACY_M
    preserve_stops: bool = config.OPTIMIZATION_PRESERVE_STOPS
    preserve_speed_changes: bool = config.OPTIMIZATION_PRESERVE_SPEED_CHANGES
    enable_time_filter: bool = config.OPTIMIZATION_ENABLE_TIME_FILTER
    enable_speed_filter: bool = config.OPTIMIZATION_ENABLE_SPEED_FILTER
    enable_accuracy_filter: bool = config.OPTIMIZATION_ENABLE_ACCURACY_FILTER

    def updated(self, **changes: Any) -> "OptimizationSettings":
        """Return a copy with ``changes`` applied."""

        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OptimizationSettings":
        """Build settings from snake_case or camelCase keys.

        Unknown keys are ignored; missing keys take the defaults.
        """

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name in known and value is not None:
                values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _snake_case(key: str) -> str:
    chars: List[str] = []
    for char in key:
        if char.isupper():
            chars.append("_")
            chars.append(char.lower())
        else:
            chars.append(char)
    return "".join(chars)


# Presets use fixed values rather than the environment-driven defaults so they
# stay comparable between deployments.
BALANCED = OptimizationSettings(
    tolerance=10.0,
    min_speed=5.0,
    min_time_interval=30_000,
    max_speed=200.0,
    min_accuracy=100.0,
    preserve_stops=True,
    preserve_speed_changes=True,
    enable_time_filter=True,
    enable_speed_filter=True,
    enable_accuracy_filter=True,
)
CONSERVATIVE = BALANCED.updated(
    tolerance=5.0,
    min_speed=2.0,
    min_time_interval=15_000,
    min_accuracy=50.0,
)
AGGRESSIVE = BALANCED.updated(
    tolerance=25.0,
    min_speed=10.0,
    min_time_interval=60_000,
    preserve_speed_changes=False,
)

OPTIMIZATION_PRESETS: Dict[str, OptimizationSettings] = {
    "conservative": CONSERVATIVE,
    "balanced": BALANCED,
    "aggressive": AGGRESSIVE,
}


def get_preset(name: str) -> OptimizationSettings:
    """Return the preset called ``name`` (case-insensitive)."""

    try:
        return OPTIMIZATION_PRESETS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown optimization preset '{name}'; "
            f"expected one of {', '.join(get_preset_names())}"
        ) from None


def get_preset_names() -> List[str]:
    return list(OPTIMIZATION_PRESETS)
