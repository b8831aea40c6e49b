"""Derive per-step kinematic metrics for a time-ordered sequence of points."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .geo import grade_degrees, haversine_distance
from .models import RawPoint, Waypoint

_LOG = logging.getLogger(__name__)

# m/s -> km/h
_MS_TO_KMH = 3.6
# Below this speed (km/h) the person is considered to be resting.
ACTIVE_SPEED_KMH = 1.5


def augment_points(points: Sequence[RawPoint]) -> Tuple[Waypoint, ...]:
    """Return waypoints carrying distance, elevation difference, grade and speed.

    Each metric is computed from the previous point in ``points``, which must
    be sorted by time. The first point has no predecessor: all its derived
    metrics are zero and it is never active. Existing derived values on the
    input (when re-augmenting waypoints) are ignored.
    """

    if not points:
        return ()
    augmented: List[Waypoint] = [Waypoint.from_point(points[0])]
    previous = points[0]
    for current in points[1:]:
        augmented.append(_augment_point(current, previous))
        previous = current
    return tuple(augmented)


def _augment_point(current: RawPoint, previous: RawPoint) -> Waypoint:
    distance = haversine_distance(previous.latlon, current.latlon)
    elevation_difference = _elevation_difference(current, previous)
    elapsed = int((current.time - previous.time).total_seconds())
    speed = _speed_kmh(distance, elapsed)
    return Waypoint.from_point(
        current,
        distance=distance,
        elevation_difference=elevation_difference,
        grade=grade_degrees(elevation_difference, distance),
        speed=speed,
        time_difference=elapsed,
        is_active=speed >= ACTIVE_SPEED_KMH,
    )


def _elevation_difference(current: RawPoint, previous: RawPoint) -> float:
    if current.elevation is None or previous.elevation is None:
        _LOG.warning(
            "Missing elevation for this and/or the previous point; "
            "elevation difference set to 0 for point %s",
            current.time.isoformat(),
        )
        return 0.0
    return current.elevation - previous.elevation


def _speed_kmh(distance_m: float, elapsed_s: int) -> float:
    return (distance_m / elapsed_s) * _MS_TO_KMH if elapsed_s > 0 else 0.0


__all__ = ["ACTIVE_SPEED_KMH", "augment_points"]
