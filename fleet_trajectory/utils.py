"""General utility helpers shared across modules."""

from __future__ import annotations

import json
import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any


def to_utc_aware(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_missing(value: Any) -> bool:
    """True for ``None`` and float NaN (pandas' marker for empty cells)."""

    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, set):
        return sorted(normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): normalise_value(val) for key, val in value.items()}
    return value


def json_dumps(value: Any, *, indent: int | None = 2) -> str:
    """Serialise ``value`` to JSON, converting datetimes and NaN first."""

    return json.dumps(normalise_value(value), indent=indent)
