"""Grouped summary statistics and z-score outlier detection for waypoints.

Every metric is summarised over all points, over the active points and over
the active points split by terrain. Distance, speed, time and grade are split
by grade into up, down and flat; elevation and elevation difference are split
by the sign of the elevation difference into up and down only.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

import numpy as np

from .models import (
    Metric,
    MetricStatistics,
    Phase,
    SummaryStats,
    TrailStatistics,
    Waypoint,
)

# Maximum slope (degrees) of wheelchair navigable paths, used as the boundary
# between flat and up/down terrain.
SLOPE_ANGLE = 2.9
# Standard deviations from the mean beyond which a value is an outlier.
OUTLIER_BOUNDARY = 4.0

MetricGetter = Callable[[Waypoint], Optional[float]]

METRIC_GETTERS: Dict[Metric, MetricGetter] = {
    Metric.TIME: lambda p: float(p.time_difference),
    Metric.DISTANCE: lambda p: p.distance,
    Metric.ELEVATION: lambda p: p.elevation,
    Metric.ELEVATION_DIFFERENCE: lambda p: p.elevation_difference,
    Metric.SPEED: lambda p: p.speed,
    Metric.GRADE: lambda p: p.grade,
}

_ELEVATION_METRICS = frozenset({Metric.ELEVATION, Metric.ELEVATION_DIFFERENCE})


def compute_trail_statistics(points: Iterable[Waypoint]) -> Optional[TrailStatistics]:
    """Summarise ``points`` per metric and phase; ``None`` when there are none."""

    all_points = list(points)
    if not all_points:
        return None
    active = [p for p in all_points if p.is_active]
    grade_groups = {
        Phase.ALL: all_points,
        Phase.ACTIVE: active,
        Phase.UP: [p for p in active if p.grade > SLOPE_ANGLE],
        Phase.DOWN: [p for p in active if p.grade < -SLOPE_ANGLE],
        Phase.FLAT: [p for p in active if -SLOPE_ANGLE <= p.grade <= SLOPE_ANGLE],
    }
    elevation_groups = {
        Phase.ALL: all_points,
        Phase.ACTIVE: active,
        Phase.UP: [p for p in active if p.elevation_difference >= 0.0],
        Phase.DOWN: [p for p in active if p.elevation_difference < 0.0],
    }
    by_metric = {
        metric: compute_metric_statistics(
            metric,
            elevation_groups if metric in _ELEVATION_METRICS else grade_groups,
        )
        for metric in Metric
    }
    return TrailStatistics(
        time=by_metric[Metric.TIME],
        distance=by_metric[Metric.DISTANCE],
        elevation=by_metric[Metric.ELEVATION],
        elevation_difference=by_metric[Metric.ELEVATION_DIFFERENCE],
        speed=by_metric[Metric.SPEED],
        grade=by_metric[Metric.GRADE],
    )


def compute_metric_statistics(
    metric: Metric, groups: Dict[Phase, List[Waypoint]]
) -> MetricStatistics:
    """Summarise one metric over pre-computed point groups.

    ``groups`` must contain at least the ALL and ACTIVE phases. Outliers are
    searched among the active points only.
    """

    getter = METRIC_GETTERS[metric]
    phases = {phase: summarize(_values(pts, getter)) for phase, pts in groups.items()}
    outliers = find_outliers(groups[Phase.ACTIVE], getter, phases[Phase.ACTIVE])
    return MetricStatistics(metric=metric, phases=phases, outliers=outliers)


def summarize(values: Sequence[float]) -> SummaryStats:
    """Return count, mean, sample standard deviation, sum, min and max."""

    if len(values) == 0:
        nan = float("nan")
        return SummaryStats(count=0, mean=nan, stddev=nan, sum=0.0, min=nan, max=nan)
    array = np.asarray(values, dtype=float)
    stddev = float(np.std(array, ddof=1)) if array.size > 1 else 0.0
    return SummaryStats(
        count=int(array.size),
        mean=float(np.mean(array)),
        stddev=stddev,
        sum=float(np.sum(array)),
        min=float(np.min(array)),
        max=float(np.max(array)),
    )


def find_outliers(
    points: Iterable[Waypoint], getter: MetricGetter, stats: SummaryStats
) -> FrozenSet[Waypoint]:
    """Return the points whose value lies more than 4 standard deviations away."""

    if not stats.count or not math.isfinite(stats.stddev) or stats.stddev == 0:
        return frozenset()
    outliers = set()
    for point in points:
        value = getter(point)
        if value is None:
            continue
        if abs((value - stats.mean) / stats.stddev) > OUTLIER_BOUNDARY:
            outliers.add(point)
    return frozenset(outliers)


def _values(points: Iterable[Waypoint], getter: MetricGetter) -> List[float]:
    values = (getter(p) for p in points)
    return [v for v in values if v is not None]


__all__ = [
    "METRIC_GETTERS",
    "OUTLIER_BOUNDARY",
    "SLOPE_ANGLE",
    "compute_metric_statistics",
    "compute_trail_statistics",
    "find_outliers",
    "summarize",
]
