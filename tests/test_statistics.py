"""Tests for grouped statistics and outlier detection."""

from __future__ import annotations

import math
from dataclasses import replace

import pytest

from trail_analysis.augmenter import augment_points
from trail_analysis.models import Metric, Phase
from trail_analysis.statistics import (
    METRIC_GETTERS,
    compute_metric_statistics,
    compute_trail_statistics,
    find_outliers,
    summarize,
)

from conftest import displace, make_track, make_waypoint


def test_no_points_gives_no_statistics() -> None:
    assert compute_trail_statistics([]) is None


def test_summarize_uses_sample_standard_deviation() -> None:
    stats = summarize([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])

    assert stats.count == 8
    assert stats.mean == pytest.approx(5.0)
    assert stats.stddev == pytest.approx(math.sqrt(32.0 / 7.0))
    assert stats.sum == pytest.approx(40.0)
    assert stats.min == 2.0
    assert stats.max == 9.0


def test_summarize_single_value_has_zero_deviation() -> None:
    stats = summarize([3.5])

    assert stats.count == 1
    assert stats.stddev == 0.0
    assert stats.mean == 3.5


def test_summarize_empty_group() -> None:
    stats = summarize([])

    assert stats.count == 0
    assert stats.sum == 0.0
    assert math.isnan(stats.mean)
    assert math.isnan(stats.stddev)
    assert math.isnan(stats.min)
    assert math.isnan(stats.max)


def test_grade_phases_partition_active_points() -> None:
    points = [
        make_waypoint(0),
        make_waypoint(5, grade=5.0, speed=4.0, is_active=True),
        make_waypoint(10, grade=-4.0, speed=4.5, is_active=True),
        make_waypoint(15, grade=1.0, speed=5.0, is_active=True),
        make_waypoint(20, grade=2.9, speed=5.5, is_active=True),
        make_waypoint(25, grade=-2.9, speed=6.0, is_active=True),
        make_waypoint(30, grade=3.5, speed=0.5, is_active=False),
    ]

    speed = compute_trail_statistics(points).speed

    assert speed.all.count == 7
    assert speed.active.count == 5
    assert speed.up.count == 1
    assert speed.down.count == 1
    assert speed.flat.count == 3
    assert speed.up.count + speed.down.count + speed.flat.count == speed.active.count
    assert speed.up.mean == pytest.approx(4.0)


def test_elevation_metrics_split_by_elevation_difference_only() -> None:
    points = [
        make_waypoint(0),
        make_waypoint(5, elevation=101.0, elevation_difference=1.0, is_active=True),
        make_waypoint(10, elevation=101.0, elevation_difference=0.0, is_active=True),
        make_waypoint(15, elevation=99.0, elevation_difference=-2.0, is_active=True),
    ]

    stats = compute_trail_statistics(points)

    for metric_stats in (stats.elevation, stats.elevation_difference):
        assert metric_stats.flat is None
        assert Phase.FLAT not in metric_stats.phases
        assert metric_stats.up.count == 2
        assert metric_stats.down.count == 1
    assert stats.elevation_difference.up.sum == pytest.approx(1.0)
    assert stats.elevation_difference.down.sum == pytest.approx(-2.0)
    assert stats.speed.flat is not None


def test_missing_elevations_are_skipped() -> None:
    points = [
        make_waypoint(0, elevation=None),
        make_waypoint(5, elevation=120.0, is_active=True),
        make_waypoint(10, elevation=None, is_active=True),
    ]

    elevation = compute_trail_statistics(points).elevation

    assert elevation.all.count == 1
    assert elevation.active.count == 1
    assert elevation.active.mean == pytest.approx(120.0)


def test_time_metric_sums_time_differences() -> None:
    waypoints = augment_points(make_track(13))

    time_stats = compute_trail_statistics(waypoints).time

    assert time_stats.all.sum == pytest.approx(60.0)
    assert time_stats.active.sum == pytest.approx(60.0)
    assert time_stats.active.count == 12


def test_single_spike_is_an_outlier() -> None:
    points = [make_waypoint(0)]
    for index in range(1, 31):
        speed = 4.9 if index % 2 else 5.1
        points.append(make_waypoint(index * 5, speed=speed, is_active=True))
    spike = make_waypoint(155, speed=50.0, is_active=True)
    points.append(spike)

    speed_stats = compute_metric_statistics(
        Metric.SPEED,
        {Phase.ALL: points, Phase.ACTIVE: [p for p in points if p.is_active]},
    )

    assert speed_stats.outliers == frozenset({spike})


def test_constant_values_have_no_outliers() -> None:
    waypoints = augment_points(make_track(30))

    stats = compute_trail_statistics(waypoints)

    assert stats.grade.active.stddev == 0.0
    assert stats.grade.outliers == frozenset()


def test_outliers_are_searched_among_active_points_only() -> None:
    points = [make_waypoint(i * 5, speed=5.0, is_active=True) for i in range(1, 20)]
    idle = make_waypoint(200, speed=0.0, is_active=False)
    points.append(idle)
    active = [p for p in points if p.is_active]

    stats = summarize([5.0, 5.1, 4.9])
    outliers = find_outliers(active, METRIC_GETTERS[Metric.SPEED], stats)

    assert idle not in outliers


def test_glitch_flags_both_affected_steps() -> None:
    track = displace(make_track(), 30)
    waypoints = augment_points(track)

    outliers = compute_trail_statistics(waypoints).speed.outliers

    assert {p.time for p in outliers} == {track[30].time, track[31].time}


def _as_tuple(stats) -> tuple:
    return (stats.count, stats.mean, stats.stddev, stats.sum, stats.min, stats.max)


def test_statistics_of_active_points_are_idempotent() -> None:
    track = [
        replace(p, elevation=100.0 + (i % 7) * 1.5)
        for i, p in enumerate(make_track(50))
    ]
    waypoints = augment_points(track)
    first = compute_trail_statistics(waypoints)

    active = [p for p in waypoints if p.is_active]
    second = compute_trail_statistics(active)

    assert len(active) < len(waypoints)
    for metric in Metric:
        before = first.for_metric(metric)
        after = second.for_metric(metric)
        assert set(after.phases) == set(before.phases)
        for phase in (Phase.ACTIVE, Phase.UP, Phase.DOWN, Phase.FLAT):
            if phase not in before.phases:
                continue
            assert _as_tuple(after.get(phase)) == pytest.approx(
                _as_tuple(before.get(phase)), nan_ok=True
            )
        assert _as_tuple(after.all) == pytest.approx(_as_tuple(before.active), nan_ok=True)
        assert after.outliers == before.outliers


def test_recomputing_statistics_is_stable() -> None:
    waypoints = augment_points(make_track(40))

    first = compute_trail_statistics(waypoints)
    second = compute_trail_statistics(waypoints)

    assert first.speed.active == second.speed.active
    assert first.speed.outliers == second.speed.outliers
