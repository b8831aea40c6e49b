"""Human oriented summaries of analysed trails.

``describe_trail`` flattens the key figures of a trail into a dict;
``statistics_frame`` and ``trails_frame`` lay statistics out as pandas
DataFrames for display or export by the caller.
"""

from __future__ import annotations

from datetime import timedelta
import math
from typing import Any, Dict, Iterable, List

import pandas as pd

from .activity import level_from_rating
from .models import Metric, Phase, Trail, TrailStatistics

_MS_TO_KMH = 3.6
_M_PER_KM = 1000.0

STATISTICS_COLUMNS = [
    "Metric",
    "Phase",
    "Count",
    "Mean",
    "Std Dev",
    "Sum",
    "Min",
    "Max",
    "Outliers",
]


def describe_trail(trail: Trail) -> Dict[str, Any]:
    """Return the key figures of a trail, keyed by a readable label."""

    stats = trail.statistics
    count = len(trail.points)
    duration = trail.end - trail.start
    minutes = duration.total_seconds() / 60.0
    description: Dict[str, Any] = {
        "Name": trail.name,
        "Number of points": count,
        "Points per minute": _safe_ratio(count, minutes),
        "Active points": sum(1 for p in trail.points if p.is_active),
        "Number of outliers": len(trail.outliers),
        "Outliers (%)": round(len(trail.outliers) * 100.0 / count, 1) if count else 0.0,
        "Activity": trail.activity.value if trail.activity else None,
        "Difficulty rating": trail.difficulty_rating,
        "Difficulty level": level_from_rating(trail.difficulty_rating).value,
        "Countries": sorted(trail.countries),
        "Start": trail.start,
        "End": trail.end,
        "Total time": duration,
    }
    if stats is None:
        return description

    time_stats = stats.time
    dist_stats = stats.distance
    description.update(
        {
            "Points per kilometer": _safe_ratio(count, dist_stats.active.sum / _M_PER_KM),
            "Moving time": timedelta(seconds=time_stats.active.sum),
            "Time up": timedelta(seconds=time_stats.up.sum),
            "Time down": timedelta(seconds=time_stats.down.sum),
            "Time flat": timedelta(seconds=time_stats.flat.sum if time_stats.flat else 0),
            "Elevation min (m)": _rounded(stats.elevation.active.min),
            "Elevation max (m)": _rounded(stats.elevation.active.max),
            "Elevation net (m)": _rounded(
                stats.elevation.active.max - stats.elevation.active.min
            ),
            "Elevation up (m)": _rounded(stats.elevation_difference.up.sum),
            "Elevation down (m)": _rounded(stats.elevation_difference.down.sum),
            "Outliers (slope)": len(stats.grade.outliers),
            "Distance (km)": round(dist_stats.active.sum / _M_PER_KM, 1),
            "Distance up (km)": round(dist_stats.up.sum / _M_PER_KM, 1),
            "Distance down (km)": round(dist_stats.down.sum / _M_PER_KM, 1),
            "Distance flat (km)": round(
                (dist_stats.flat.sum if dist_stats.flat else 0.0) / _M_PER_KM, 1
            ),
            "Moving speed (km/h)": _phase_speed(stats, Phase.ACTIVE),
            "Speed up (km/h)": _phase_speed(stats, Phase.UP),
            "Speed down (km/h)": _phase_speed(stats, Phase.DOWN),
            "Speed flat (km/h)": _phase_speed(stats, Phase.FLAT),
            "Max speed (km/h)": _rounded(stats.speed.active.max, 1),
            "Outliers (speed)": len(stats.speed.outliers),
        }
    )
    return description


def statistics_frame(statistics: TrailStatistics) -> pd.DataFrame:
    """One row per metric and phase, with the outlier count of the metric."""

    rows: List[Dict[str, Any]] = []
    for metric in Metric:
        metric_stats = statistics.for_metric(metric)
        for phase, summary in metric_stats.phases.items():
            rows.append(
                {
                    "Metric": metric.value,
                    "Phase": phase.value,
                    "Count": summary.count,
                    "Mean": summary.mean,
                    "Std Dev": summary.stddev,
                    "Sum": summary.sum,
                    "Min": summary.min,
                    "Max": summary.max,
                    "Outliers": len(metric_stats.outliers),
                }
            )
    return pd.DataFrame(rows, columns=STATISTICS_COLUMNS)


def trails_frame(trails: Iterable[Trail]) -> pd.DataFrame:
    """One row per trail with its key figures."""

    rows = [describe_trail(trail) for trail in trails]
    df = pd.DataFrame(rows)
    if not df.empty and "Countries" in df.columns:
        df["Countries"] = df["Countries"].map(", ".join)
    return df


def _phase_speed(stats: TrailStatistics, phase: Phase) -> float | None:
    distance = stats.distance.get(phase)
    elapsed = stats.time.get(phase)
    if distance is None or elapsed is None or not elapsed.sum:
        return None
    return round(distance.sum / elapsed.sum * _MS_TO_KMH, 1)


def _safe_ratio(numerator: float, denominator: float) -> float | None:
    if not denominator:
        return None
    return round(numerator / denominator)


def _rounded(value: float, digits: int = 0) -> float | None:
    if not math.isfinite(value):
        return None
    return round(value, digits)


__all__ = ["STATISTICS_COLUMNS", "describe_trail", "statistics_frame", "trails_frame"]
