"""Central configuration for the trail analysis package.

All values are constants imported by the rest of the package. They only
provide defaults: the refinement loop receives its settings explicitly.
Secrets are read from environment variables, or from a `.env` file found in
the working directory or one of its parents.
"""

from __future__ import annotations

import os
from typing import Callable, TypeVar

from dotenv import load_dotenv

_T = TypeVar("_T")

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})

load_dotenv()


def _env(key: str, default: _T, parse: Callable[[str], _T]) -> _T:
    """Return the parsed environment value, or ``default`` when unset or invalid."""

    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        return default


def _parse_bool(raw: str) -> bool:
    word = raw.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _env_float(key: str, default: float) -> float:
    return _env(key, default, float)


def _env_int(key: str, default: int) -> int:
    return _env(key, default, int)


def _env_bool(key: str, default: bool) -> bool:
    return _env(key, default, _parse_bool)


# ---------------------------------------------------------------------------
# MapQuest services
# ---------------------------------------------------------------------------
# API key shared by the elevation and reverse geocoding services. When empty,
# elevation data is not corrected and countries are not guessed.
MAPQUEST_API_KEY = os.getenv("MAPQUEST_API_KEY", "")

MAPQUEST_ELEVATION_URL = os.getenv(
    "MAPQUEST_ELEVATION_URL", "https://open.mapquestapi.com/elevation/v1/profile"
)
MAPQUEST_GEOCODING_URL = os.getenv(
    "MAPQUEST_GEOCODING_URL", "https://open.mapquestapi.com/nominatim/v1/reverse.php"
)


# ---------------------------------------------------------------------------
# HTTP settings
# ---------------------------------------------------------------------------
# Connect timeouts (seconds). Both services are optional, so give up early.
ELEVATION_CONNECT_TIMEOUT = _env_float("ELEVATION_CONNECT_TIMEOUT", 5.0)
GEOCODING_CONNECT_TIMEOUT = _env_float("GEOCODING_CONNECT_TIMEOUT", 3.0)

# Read timeout in seconds.
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 15.0)

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Retries of a failed MapQuest request and the backoff factor between them.
MAPQUEST_RETRIES = _env_int("MAPQUEST_RETRIES", 1)
MAPQUEST_RETRY_BACKOFF = _env_float("MAPQUEST_RETRY_BACKOFF", 0.5)

# Nominatim-based geocoding asks clients to identify themselves.
HTTP_USER_AGENT = os.getenv("TRAIL_HTTP_USER_AGENT", "trail-analysis/0.1")


# ---------------------------------------------------------------------------
# Refinement defaults
# ---------------------------------------------------------------------------
# Number of analysis passes used to hunt down outliers.
CLEANUP_PASSES = _env_int("TRAIL_CLEANUP_PASSES", 3)

# Keep suspicious speed/grade values instead of removing them.
KEEP_OUTLIERS = _env_bool("TRAIL_KEEP_OUTLIERS", False)

# Keep points recorded while standing still.
KEEP_IDLE_POINTS = _env_bool("TRAIL_KEEP_IDLE_POINTS", False)

# Skill level the difficulty rating is computed for.
USER_LEVEL = os.getenv("TRAIL_USER_LEVEL", "INTERMEDIATE")


# ---------------------------------------------------------------------------
# Reverse geocoding
# ---------------------------------------------------------------------------
# Sample one point per hour instead of a single point, for trails that cross
# borders.
CROSS_BORDER = _env_bool("TRAIL_CROSS_BORDER", False)

# Parallel lookups when several points are sampled.
GEOCODING_MAX_WORKERS = _env_int("GEOCODING_MAX_WORKERS", 4)

# Cached lookups, keyed by coordinates rounded to ~100 m.
GEOCODING_CACHE_SIZE = _env_int("GEOCODING_CACHE_SIZE", 512)
GEOCODING_CACHE_TTL_SECONDS = _env_int("GEOCODING_CACHE_TTL_SECONDS", 3600)


# ---------------------------------------------------------------------------
# Performance tuning
# ---------------------------------------------------------------------------
# Trails built in parallel by the batch service.
MAX_WORKERS = _env_int("TRAIL_MAX_WORKERS", 4)
