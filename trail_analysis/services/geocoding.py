"""Reverse geocoding of trail points into ISO 3166 country codes."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
import random
from threading import RLock
from typing import Any, List, Sequence, Set, Tuple

from cachetools import TTLCache
import requests
from requests import Session

from .. import config
from ..errors import GeocodingError
from ..models import RawPoint
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

_CacheKey = Tuple[float, float]

# Module-level TTL+LRU cache shared by all guessers. Coordinates are rounded
# to three decimals (~100 m), far below the size of a border crossing.
_country_cache: TTLCache[_CacheKey, str] = TTLCache(
    maxsize=max(1, config.GEOCODING_CACHE_SIZE),
    ttl=max(1, config.GEOCODING_CACHE_TTL_SECONDS),
)
_country_cache_lock = RLock()


def clear_country_cache() -> None:
    with _country_cache_lock:
        _country_cache.clear()


def select_points(
    points: Sequence[RawPoint],
    cross_border: bool,
    rng: random.Random | None = None,
) -> List[RawPoint]:
    """Pick the points to geocode.

    A single random point is enough for most trails. Trails that cross
    borders get one point per hour of recording, plus the last point.
    """

    if not points:
        return []
    if not cross_border:
        return [(rng or random).choice(list(points))]
    hours = int((points[-1].time - points[0].time).total_seconds() // 3600)
    step = max(1, len(points) // max(1, hours))
    selected = list(points[::step])
    if selected[-1] is not points[-1]:
        selected.append(points[-1])
    return selected


class MapQuestCountryGuesser:
    """Callable returning the countries crossed by a trail.

    Never raises: when the service is unavailable an empty set is returned.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        cross_border: bool | None = None,
        session: Session | None = None,
        url: str | None = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        max_workers: int | None = None,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ):
        self.api_key = config.MAPQUEST_API_KEY if api_key is None else api_key
        self.cross_border = config.CROSS_BORDER if cross_border is None else cross_border
        self._session = session
        self.url = url or config.MAPQUEST_GEOCODING_URL
        self.connect_timeout = (
            config.GEOCODING_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        )
        self.read_timeout = config.REQUEST_TIMEOUT if read_timeout is None else read_timeout
        self.max_workers = max(1, max_workers or config.GEOCODING_MAX_WORKERS)
        self._rng = rng
        self._log = logger or LOGGER

    @property
    def session(self) -> Session:
        return self._session or get_default_session()

    def __call__(self, points: Sequence[RawPoint]) -> Set[str]:
        if not self.api_key:
            self._log.warning("MapQuest key not found: country will not be guessed.")
            return set()
        selected = select_points(points, self.cross_border, self._rng)
        if not selected:
            return set()
        workers = min(self.max_workers, len(selected))
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                codes = list(executor.map(self.lookup_country, selected))
        except GeocodingError as exc:
            self._log.warning("Country guessing failed: %s", exc)
            return set()
        return {code.upper() for code in codes}

    def lookup_country(self, point: RawPoint) -> str:
        """Return the lower-case country code of the place ``point`` lies in."""

        key: _CacheKey = (round(point.latitude, 3), round(point.longitude, 3))
        with _country_cache_lock:
            cached = _country_cache.get(key)
        if cached is not None:
            return cached

        params = {
            "format": "json",
            "lat": point.latitude,
            "lon": point.longitude,
            "key": self.api_key,
        }
        self._log.debug("GET %s lat=%s lon=%s", self.url, point.latitude, point.longitude)
        try:
            response = self.session.get(
                self.url,
                params=params,
                timeout=(self.connect_timeout, self.read_timeout),
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise GeocodingError("Connection to MapQuest timed out") from exc
        except (requests.RequestException, ValueError) as exc:
            raise GeocodingError(f"Error querying MapQuest: {exc}") from exc

        country = _parse_country(payload)
        self._log.debug("MapQuest response contains a country code: %s", country)
        with _country_cache_lock:
            _country_cache[key] = country
        return country


def _parse_country(payload: Any) -> str:
    address = payload.get("address") if isinstance(payload, dict) else None
    country = address.get("country_code") if isinstance(address, dict) else None
    if not isinstance(country, str) or not country.strip():
        raise GeocodingError("Could not find a country code in the response from MapQuest.")
    return country.strip().lower()


__all__ = ["MapQuestCountryGuesser", "clear_country_cache", "select_points"]
