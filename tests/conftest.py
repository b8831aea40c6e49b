"""Global pytest fixtures & helpers.

Adds project root to path and provides track factories shared by the
augmentation, statistics and refinement tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trail_analysis.models import RawPoint, Waypoint

START = datetime(2015, 6, 1, 8, 0, 0, tzinfo=timezone.utc)

# Northward steps (degrees of latitude) cycled along a track: about 6.7 m on
# average, i.e. roughly 4.8 km/h with 5 s between fixes.
LAT_STEPS = (0.00006, 0.000072, 0.000048, 0.000066, 0.000054)


# --- Factory helpers -------------------------------------------------
def make_track(
    count: int = 60,
    *,
    interval_s: int = 5,
    elevation: Optional[float] = 100.0,
    start_lat: float = 47.0,
    start_lon: float = 8.0,
    steps: Sequence[float] = LAT_STEPS,
) -> List[RawPoint]:
    """Build a walk heading north at a slightly irregular pace."""

    points = []
    lat = start_lat
    for index in range(count):
        if index:
            lat += steps[(index - 1) % len(steps)]
        points.append(
            RawPoint(
                time=START + timedelta(seconds=index * interval_s),
                longitude=start_lon,
                latitude=lat,
                elevation=elevation,
            )
        )
    return points


def displace(points: List[RawPoint], index: int, lon_offset: float = 0.01) -> List[RawPoint]:
    """Return a copy of ``points`` with one fix pushed sideways (a GPS glitch)."""

    glitched = list(points)
    point = glitched[index]
    glitched[index] = RawPoint(
        time=point.time,
        longitude=point.longitude + lon_offset,
        latitude=point.latitude,
        elevation=point.elevation,
    )
    return glitched


def make_waypoint(seconds: int, **derived) -> Waypoint:
    values = {"longitude": 8.0, "latitude": 47.0, "elevation": 100.0}
    values.update({k: derived.pop(k) for k in list(derived) if k in values})
    return Waypoint(time=START + timedelta(seconds=seconds), **values, **derived)


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def track() -> List[RawPoint]:
    return make_track()


@pytest.fixture
def glitched_track() -> List[RawPoint]:
    return displace(make_track(), 30)
