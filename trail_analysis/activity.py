"""Activity guessing and difficulty rating from trail statistics."""

from __future__ import annotations

from datetime import datetime
import logging
import math
from typing import Dict, Tuple

from .models import Activity, Level, MetricStatistics

_LOG = logging.getLogger(__name__)

_MARATHON_M = 42195.0
_LONG_DISTANCE_M = 20000.0
_FAST_SPEED_KMH = 10.0

_METERS_TO_FEET = 3.280840
_KM_TO_MILES = 0.621371
_METERS_PER_KM = 1000.0

# (weight applied to the elevation gain, divider applied to the whole rating)
_LEVEL_FACTORS: Dict[Level, Tuple[float, float]] = {
    Level.BEGINNER: (0.002, 1.0),
    Level.INTERMEDIATE: (0.001, 1.5),
    Level.ADVANCED: (0.0005, 2.0),
}

_BEGINNER_BELOW = 6
_ADVANCED_FROM = 10


def guess_activity(
    distance_stats: MetricStatistics, speed_stats: MetricStatistics
) -> Activity:
    """Determine the activity out of the active distance and speed statistics.

    Long trails are considered bike rides. Otherwise the activity whose
    expected average speed is closest to the active mean speed wins.
    """

    distance = distance_stats.active.sum
    speed = speed_stats.active.mean
    if distance > _MARATHON_M or (distance > _LONG_DISTANCE_M and speed > _FAST_SPEED_KMH):
        return Activity.BIKING
    if not math.isfinite(speed):
        _LOG.debug("No active points to guess the activity from; assuming hiking")
        return Activity.HIKING
    activity = min(Activity, key=lambda a: abs(speed - a.reference_speed))
    _LOG.debug(
        "Guessed activity: %s (difference with average: %.1f)",
        activity.value,
        abs(speed - activity.reference_speed),
    )
    return activity


def difficulty_rating(
    activity: Activity,
    user_level: Level,
    distance_stats: MetricStatistics,
    elevation_difference_stats: MetricStatistics,
    start: datetime,
    end: datetime,
) -> int:
    """Rate how demanding a trail is for a person of ``user_level``.

    Only hiking trails are rated (the formula comes from
    http://www.hikingincolorado.org/hikecalc.html); other activities get 0.
    The rating is spread over the number of days the trail spans.
    """

    if activity is not Activity.HIKING:
        return 0
    weight, divider = _LEVEL_FACTORS[user_level]
    gain_ft = elevation_difference_stats.up.sum * _METERS_TO_FEET
    distance_miles = distance_stats.active.sum * _KM_TO_MILES / _METERS_PER_KM
    days = max(1, (end - start).days + 1)
    rating = (weight * gain_ft + distance_miles) / divider / days
    return int(math.floor(rating))


def level_from_rating(rating: int) -> Level:
    if rating < _BEGINNER_BELOW:
        return Level.BEGINNER
    if rating >= _ADVANCED_FROM:
        return Level.ADVANCED
    return Level.INTERMEDIATE


__all__ = ["difficulty_rating", "guess_activity", "level_from_rating"]
