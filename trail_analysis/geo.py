"""Great-circle distance and slope helpers."""

from __future__ import annotations

import math

from .models import LatLon

EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(first: LatLon, second: LatLon) -> float:
    """Return the great-circle distance in metres between two (lat, lon) pairs."""

    lat1, lon1 = first
    lat2, lon2 = second
    sin = math.sin
    cos = math.cos
    radians = math.radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def grade_degrees(elevation_difference: float, distance: float) -> float:
    """Return the signed inclination, in degrees, over a horizontal distance."""

    if distance == 0:
        return 0.0
    return math.degrees(math.atan(elevation_difference / distance))


__all__ = ["EARTH_RADIUS_M", "grade_degrees", "haversine_distance"]
