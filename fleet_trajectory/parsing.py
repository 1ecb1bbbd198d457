"""Convert raw position records (Traccar JSON, CSV rows) into :class:`Position`."""

from __future__ import annotations

import json
import logging
import numbers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .errors import PositionFormatError
from .models import Position
from .utils import is_missing, to_utc_aware

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Checked in order; Traccar fills deviceTime, fixTime and serverTime.
_TIMESTAMP_KEYS = (
    "timestamp",
    "deviceTime",
    "device_time",
    "fixTime",
    "fix_time",
    "serverTime",
    "server_time",
)
_FUEL_KEYS = ("fuel_level", "fuelLevel", "fuel")
_HARSH_ACCELERATION_ALARMS = {"hardacceleration", "harshacceleration"}
_HARSH_BRAKING_ALARMS = {"hardbraking", "harshbraking"}


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string, datetime or epoch-milliseconds value as UTC."""

    if isinstance(value, pd.Timestamp):
        return to_utc_aware(value.to_pydatetime())
    if isinstance(value, datetime):
        return to_utc_aware(value)
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        if is_missing(value):
            raise PositionFormatError("Timestamp is empty")
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_utc_aware(datetime.fromisoformat(text))
        except ValueError as exc:
            raise PositionFormatError(f"Unparseable timestamp: {value!r}") from exc
    raise PositionFormatError(f"Unsupported timestamp type: {type(value).__name__}")


def position_from_record(
    record: Mapping[str, Any], speed_multiplier: float = 1.0
) -> Position:
    """Build a :class:`Position` from a snake_case, camelCase or Traccar record.

    Optional fields that are missing or empty become ``None``. Raises
    :class:`PositionFormatError` when coordinates or a timestamp are absent.
    """

    if not isinstance(record, Mapping):
        raise PositionFormatError(
            f"Position record must be an object, got {type(record).__name__}"
        )
    attributes = record.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        attributes = {}

    raw_time = _first_present(record, _TIMESTAMP_KEYS)
    if raw_time is None:
        raise PositionFormatError("Position record has no timestamp")
    latitude = _optional_float(record.get("latitude"))
    longitude = _optional_float(record.get("longitude"))
    if latitude is None or longitude is None:
        raise PositionFormatError("Position record has no coordinates")

    speed = _optional_float(record.get("speed"))
    fuel = _optional_float(_first_present(record, _FUEL_KEYS))
    if fuel is None:
        fuel = _optional_float(_first_present(attributes, _FUEL_KEYS))

    alarm = str(attributes.get("alarm") or "").replace("_", "").lower()
    harsh_acceleration = _optional_bool(
        _first_present(record, ("harsh_acceleration", "harshAcceleration"))
    )
    if harsh_acceleration is None:
        harsh_acceleration = _optional_bool(attributes.get("harshAcceleration"))
    if alarm in _HARSH_ACCELERATION_ALARMS:
        harsh_acceleration = True
    harsh_braking = _optional_bool(
        _first_present(record, ("harsh_braking", "harshBraking"))
    )
    if harsh_braking is None:
        harsh_braking = _optional_bool(attributes.get("harshBraking"))
    if alarm in _HARSH_BRAKING_ALARMS:
        harsh_braking = True

    address = record.get("address")
    return Position(
        timestamp=parse_timestamp(raw_time),
        latitude=latitude,
        longitude=longitude,
        speed=(speed or 0.0) * speed_multiplier,
        accuracy=_optional_float(record.get("accuracy")),
        fuel_level=fuel,
        harsh_acceleration=harsh_acceleration,
        harsh_braking=harsh_braking,
        address=None if is_missing(address) else str(address),
        device_id=_optional_int(_first_present(record, ("device_id", "deviceId"))),
        position_id=_optional_int(_first_present(record, ("position_id", "id"))),
    )


def positions_from_records(
    records: Iterable[Mapping[str, Any]],
    speed_multiplier: float = 1.0,
    *,
    skip_invalid: bool = False,
) -> List[Position]:
    """Parse records and return them sorted by timestamp (stable).

    With ``skip_invalid`` unusable records are logged and dropped instead of
    raising :class:`PositionFormatError`.
    """

    positions: List[Position] = []
    for index, record in enumerate(records):
        try:
            positions.append(position_from_record(record, speed_multiplier))
        except PositionFormatError as exc:
            if not skip_invalid:
                raise
            LOGGER.warning("Skipping position record %d: %s", index, exc)
    positions.sort(key=lambda pos: pos.timestamp)
    return positions


def load_positions(
    path: PathLike,
    speed_multiplier: float = 1.0,
    *,
    skip_invalid: bool = False,
) -> List[Position]:
    """Load positions from a ``.json`` or ``.csv`` file."""

    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Position file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        try:
            with open(file_path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PositionFormatError(f"Invalid JSON in {file_path}: {exc}") from exc
        if isinstance(payload, Mapping):
            payload = payload.get("positions", [])
        if not isinstance(payload, list):
            raise PositionFormatError(
                f"Expected a list of positions in {file_path}, "
                f"got {type(payload).__name__}"
            )
        records: List[Mapping[str, Any]] = payload
    elif suffix == ".csv":
        frame = pd.read_csv(file_path)
        records = frame.to_dict(orient="records")
    else:
        raise PositionFormatError(
            f"Unsupported position file type: {suffix or file_path.name}"
        )

    positions = positions_from_records(
        records, speed_multiplier, skip_invalid=skip_invalid
    )
    LOGGER.info("Loaded %d positions from %s", len(positions), file_path)
    return positions


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if not is_missing(value) and value != "":
            return value
    return None


def _optional_float(value: Any) -> Optional[float]:
    if is_missing(value) or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> Optional[int]:
    number = _optional_float(value)
    if number is None:
        return None
    try:
        return int(number)
    except (OverflowError, ValueError):
        return None


def _optional_bool(value: Any) -> Optional[bool]:
    if is_missing(value) or value == "":
        return None
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        return None
    return bool(value)
