"""Central error types used across the application."""

from __future__ import annotations


class PositionFormatError(RuntimeError):
    """Raised when a position record lacks coordinates or a usable timestamp."""


class TraccarAPIError(RuntimeError):
    """Base error for Traccar API failures."""


class TraccarPermissionError(TraccarAPIError):
    """Raised when the server rejects the supplied credentials."""


class TraccarResourceNotFoundError(TraccarAPIError):
    """Raised when a device or report endpoint does not exist."""


__all__ = [
    "PositionFormatError",
    "TraccarAPIError",
    "TraccarPermissionError",
    "TraccarResourceNotFoundError",
]
