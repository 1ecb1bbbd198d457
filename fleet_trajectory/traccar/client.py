"""Minimal Traccar REST client for device lists and route history."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Hashable, List, Optional

import requests
from cachetools import TTLCache

from .. import config
from ..errors import (
    TraccarAPIError,
    TraccarPermissionError,
    TraccarResourceNotFoundError,
)
from ..models import Position
from ..parsing import positions_from_records
from ..utils import to_utc_aware
from .session import TraccarCredentials, create_session

LOGGER = logging.getLogger(__name__)

JSONList = List[Dict[str, Any]]


class TraccarClient:
    """Fetch devices and historical positions from a Traccar server.

    Credentials and the HTTP session are injected so several servers or
    accounts can be used side by side. Responses are cached in memory for
    ``cache_ttl`` seconds.
    """

    def __init__(
        self,
        base_url: str = "",
        credentials: Optional[TraccarCredentials] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT,
        speed_multiplier: float = config.TRACCAR_SPEED_MULTIPLIER,
        cache_ttl: float = config.TRACCAR_CACHE_TTL_SECONDS,
        cache_size: int = config.TRACCAR_CACHE_SIZE,
    ) -> None:
        self.base_url = (base_url or config.TRACCAR_URL).rstrip("/")
        if not self.base_url:
            raise ValueError("Traccar base URL is not configured (set TRACCAR_URL)")
        self.credentials = credentials or TraccarCredentials.from_config()
        self.session = session or create_session()
        self.timeout = timeout
        self.speed_multiplier = speed_multiplier
        self._cache: TTLCache[Hashable, Any] = TTLCache(
            maxsize=max(1, cache_size), ttl=cache_ttl
        )
        self._cache_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_devices(self) -> JSONList:
        """Return the devices visible to the configured account."""

        key = ("devices",)
        cached = self._cache_get(key)
        if cached is not None:
            return cached
        devices = self._get_json("/api/devices")
        if not isinstance(devices, list):
            raise TraccarAPIError("Unexpected /api/devices payload")
        LOGGER.info("Fetched %d devices from Traccar", len(devices))
        self._cache_put(key, devices)
        return devices

    def get_route(
        self,
        device_id: int,
        start: datetime,
        end: datetime,
        limit: int = config.TRACCAR_ROUTE_LIMIT,
    ) -> List[Position]:
        """Return the positions a device reported between ``start`` and ``end``.

        The route report is tried first. When it fails or comes back empty the
        latest positions endpoint is used and filtered to the window.
        """

        start_utc, end_utc = to_utc_aware(start), to_utc_aware(end)
        key = ("route", device_id, start_utc.isoformat(), end_utc.isoformat(), limit)
        cached = self._cache_get(key)
        if cached is not None:
            return list(cached)

        records: JSONList = []
        try:
            payload = self._get_json(
                "/api/reports/route",
                params={
                    "deviceId": device_id,
                    "from": _iso(start_utc),
                    "to": _iso(end_utc),
                    "limit": limit,
                },
            )
            records = payload if isinstance(payload, list) else []
        except TraccarPermissionError:
            raise
        except TraccarAPIError as exc:
            LOGGER.warning("Route report failed for device %s: %s", device_id, exc)

        if records:
            positions = self._parse(records)
        else:
            payload = self._get_json("/api/positions", params={"deviceId": device_id})
            latest = payload if isinstance(payload, list) else []
            positions = [
                pos
                for pos in self._parse(latest)
                if start_utc <= pos.timestamp <= end_utc
            ]
        LOGGER.info(
            "Fetched %d positions for device %s (%s to %s)",
            len(positions),
            device_id,
            start_utc.isoformat(),
            end_utc.isoformat(),
        )
        self._cache_put(key, positions)
        return list(positions)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _parse(self, records: JSONList) -> List[Position]:
        return positions_from_records(
            records, self.speed_multiplier, skip_invalid=True
        )

    def _cache_get(self, key: Hashable) -> Any:
        with self._cache_lock:
            return self._cache.get(key)

    def _cache_put(self, key: Hashable, value: Any) -> None:
        with self._cache_lock:
            self._cache[key] = value

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        LOGGER.debug("GET %s params=%s", url, params)
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.credentials.headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TraccarAPIError(f"GET {path} failed: {exc}") from exc
        _raise_for_status(response, path)
        try:
            return response.json()
        except ValueError as exc:
            raise TraccarAPIError(f"GET {path} returned invalid JSON") from exc


def _raise_for_status(response: requests.Response, path: str) -> None:
    status = response.status_code
    if status < 400:
        return
    detail = _error_text(response)
    message = f"GET {path} failed (status {status})"
    if detail:
        message = f"{message} | {detail}"
    if status in (401, 403):
        raise TraccarPermissionError(message)
    if status == 404:
        raise TraccarResourceNotFoundError(message)
    raise TraccarAPIError(message)


def _error_text(response: requests.Response) -> Optional[str]:
    text = getattr(response, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")
