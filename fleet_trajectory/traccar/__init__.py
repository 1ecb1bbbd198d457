"""Traccar GPS server integration (route history fetching)."""

from .client import TraccarClient
from .session import TraccarCredentials, create_session

__all__ = ["TraccarClient", "TraccarCredentials", "create_session"]
