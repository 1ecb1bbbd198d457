"""Central configuration for the fleet trajectory toolkit.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Coordinate optimization defaults
# ---------------------------------------------------------------------------
# Maximum deviation (metres) a dropped point may have from the simplified line.
OPTIMIZATION_TOLERANCE_M = _env_float("OPTIMIZATION_TOLERANCE_M", 10.0)

# Positions slower than this (km/h) are removed by the speed filter.
OPTIMIZATION_MIN_SPEED_KMH = _env_float("OPTIMIZATION_MIN_SPEED_KMH", 5.0)

# Minimum spacing (milliseconds) between kept positions in the time filter.
OPTIMIZATION_MIN_TIME_INTERVAL_MS = _env_int(
    "OPTIMIZATION_MIN_TIME_INTERVAL_MS", 30_000
)

# Informational only. No filter rejects positions above this speed.
OPTIMIZATION_MAX_SPEED_KMH = _env_float("OPTIMIZATION_MAX_SPEED_KMH", 200.0)

# Positions reporting a larger accuracy radius (metres) are discarded.
OPTIMIZATION_MIN_ACCURACY_M = _env_float("OPTIMIZATION_MIN_ACCURACY_M", 100.0)

OPTIMIZATION_PRESERVE_STOPS = _env_bool("OPTIMIZATION_PRESERVE_STOPS", True)
OPTIMIZATION_PRESERVE_SPEED_CHANGES = _env_bool(
    "OPTIMIZATION_PRESERVE_SPEED_CHANGES", True
)

# Stage toggles for the filter pipeline.
OPTIMIZATION_ENABLE_TIME_FILTER = _env_bool("OPTIMIZATION_ENABLE_TIME_FILTER", True)
OPTIMIZATION_ENABLE_SPEED_FILTER = _env_bool("OPTIMIZATION_ENABLE_SPEED_FILTER", True)
OPTIMIZATION_ENABLE_ACCURACY_FILTER = _env_bool(
    "OPTIMIZATION_ENABLE_ACCURACY_FILTER", True
)


# ---------------------------------------------------------------------------
# Efficiency analysis
# ---------------------------------------------------------------------------
# Minimum stationary duration (minutes) reported as an idle period.
IDLE_THRESHOLD_MINUTES = _env_float("IDLE_THRESHOLD_MINUTES", 5.0)


# ---------------------------------------------------------------------------
# Traccar settings
# ---------------------------------------------------------------------------
# Base URL of the Traccar server, e.g. https://fleet.example.com
TRACCAR_URL = os.getenv("TRACCAR_URL", "")

# Credentials pulled from the environment. Do not hardcode secrets. A token
# takes precedence over user/password when both are present.
TRACCAR_USER = os.getenv("TRACCAR_USER", "")
TRACCAR_PASSWORD = os.getenv("TRACCAR_PASSWORD", "")
TRACCAR_TOKEN = os.getenv("TRACCAR_TOKEN", "")

# Traccar reports speed in knots. Set to 1.852 to convert to km/h; the default
# keeps the raw device value.
TRACCAR_SPEED_MULTIPLIER = _env_float("TRACCAR_SPEED_MULTIPLIER", 1.0)

# Default number of route points requested per call.
TRACCAR_ROUTE_LIMIT = _env_int("TRACCAR_ROUTE_LIMIT", 1000)

# In-memory response cache for device lists and route history.
TRACCAR_CACHE_TTL_SECONDS = _env_int("TRACCAR_CACHE_TTL_SECONDS", 300)
TRACCAR_CACHE_SIZE = _env_int("TRACCAR_CACHE_SIZE", 128)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
HTTP_POOL_CONNECTIONS = _env_int("HTTP_POOL_CONNECTIONS", 10)
HTTP_POOL_MAXSIZE = _env_int("HTTP_POOL_MAXSIZE", 10)

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 15.0)


# ---------------------------------------------------------------------------
# Excel formatting
# ---------------------------------------------------------------------------
# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = _env_bool("EXCEL_AUTOSIZE_COLUMNS", True)
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = (
    5000  # skip autosize for very large sheets (performance guard)
)
