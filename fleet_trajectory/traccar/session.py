"""HTTP session factory and credentials for Traccar API calls."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Dict

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from .. import config

__all__ = ["TraccarCredentials", "create_session"]


@dataclass(frozen=True, slots=True)
class TraccarCredentials:
    """Either a bearer token or a user/password pair for basic auth."""

    user: str = ""
    password: str = ""
    token: str = ""

    @classmethod
    def from_config(cls) -> "TraccarCredentials":
        return cls(
            user=config.TRACCAR_USER,
            password=config.TRACCAR_PASSWORD,
            token=config.TRACCAR_TOKEN,
        )

    @property
    def configured(self) -> bool:
        return bool(self.token or self.user)

    def headers(self) -> Dict[str, str]:
        """Return the Authorization header (empty when nothing is configured)."""

        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        if self.user:
            raw = f"{self.user}:{self.password}".encode("utf-8")
            return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
        return {}

    def __repr__(self) -> str:
        # Never leak secrets through logging.
        return (
            f"TraccarCredentials(user={self.user!r}, "
            f"password={'***' if self.password else ''!r}, "
            f"token={'***' if self.token else ''!r})"
        )


def create_session() -> Session:
    """Pooled session with JSON headers. No retry adapter is mounted."""

    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=config.HTTP_POOL_CONNECTIONS,
        pool_maxsize=config.HTTP_POOL_MAXSIZE,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
        }
    )
    return session
