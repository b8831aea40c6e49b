"""Elevation correction through the MapQuest elevation profile service.

GPS receivers record elevation poorly, so the points are sent (as an encoded
polyline) to MapQuest and the returned heights replace the recorded ones.
Any failure leaves the points untouched: correction is best effort only.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, List, Optional, Sequence

import requests
from requests import Session

from .. import config
from ..errors import ElevationServiceError
from ..models import RawPoint
from ..polyline_codec import encode_points
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

# Height returned by the service where it has no elevation model.
NO_DATA_HEIGHT = -32768.0


class MapQuestElevationFixer:
    """Callable replacing the elevation of points with MapQuest heights."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        session: Session | None = None,
        url: str | None = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        logger: logging.Logger | None = None,
    ):
        self.api_key = config.MAPQUEST_API_KEY if api_key is None else api_key
        self.url = url or config.MAPQUEST_ELEVATION_URL
        self._session = session
        self.connect_timeout = (
            config.ELEVATION_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        )
        self.read_timeout = config.REQUEST_TIMEOUT if read_timeout is None else read_timeout
        self._log = logger or LOGGER

    @property
    def session(self) -> Session:
        return self._session or get_default_session()

    def __call__(self, points: Sequence[RawPoint]) -> List[RawPoint]:
        if not self.api_key:
            self._log.warning(
                "MapQuest key not found: elevation data will not be corrected."
            )
            return list(points)
        if not points:
            self._log.info("No elevation data to be corrected.")
            return []
        try:
            heights = self.fetch_heights(points)
            fixed = replace_elevation(points, heights)
        except ElevationServiceError as exc:
            self._log.warning(
                "There was an error getting elevation data from MapQuest. "
                "Initial elevation data will be used instead. The error was: %s",
                exc,
            )
            return list(points)
        self._log.info("Successfully retrieved elevation data with MapQuest")
        return fixed

    def fetch_heights(self, points: Sequence[RawPoint]) -> List[Optional[float]]:
        """Return one height (metres) per point, ``None`` where unknown."""

        form = {
            "outFormat": "json",
            "shapeFormat": "cmp6",
            "useFilter": "true",
            "outShapeFormat": "none",
            "latLngCollection": encode_points(points),
        }
        self._log.debug("POST %s (%d points)", self.url, len(points))
        try:
            response = self.session.post(
                self.url,
                params={"key": self.api_key},
                data=form,
                timeout=(self.connect_timeout, self.read_timeout),
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise ElevationServiceError("Connection to MapQuest timed out") from exc
        except (requests.RequestException, ValueError) as exc:
            raise ElevationServiceError(f"Error querying MapQuest: {exc}") from exc
        return _parse_heights(payload)


def replace_elevation(
    points: Sequence[RawPoint], heights: Sequence[Optional[float]]
) -> List[RawPoint]:
    """Return copies of ``points`` carrying the given heights.

    Points without a usable height keep their recorded elevation.
    """

    if len(points) != len(heights):
        raise ElevationServiceError(
            f"Elevation data is incomplete. Expected {len(points)} but found "
            f"{len(heights)} points in the response from MapQuest."
        )
    return [
        point if height is None else replace(point, elevation=height)
        for point, height in zip(points, heights)
    ]


def _parse_heights(payload: Any) -> List[Optional[float]]:
    profile = payload.get("elevationProfile") if isinstance(payload, dict) else None
    if not profile:
        raise ElevationServiceError(
            "Could not find elevation data in the response from MapQuest."
        )
    heights: List[Optional[float]] = []
    for entry in profile:
        try:
            height = float(entry["height"])
        except (KeyError, TypeError, ValueError):
            heights.append(None)
            continue
        heights.append(None if height == NO_DATA_HEIGHT else height)
    return heights


__all__ = ["MapQuestElevationFixer", "NO_DATA_HEIGHT", "replace_elevation"]
