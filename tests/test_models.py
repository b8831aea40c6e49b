"""Tests for value semantics of points, statistics and trails."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from trail_analysis import build_trail
from trail_analysis.models import Metric, MetricStatistics, Phase, RawPoint, Waypoint

from conftest import make_track


def test_built_trail_is_hashable(track) -> None:
    trail = build_trail("Walk", track)

    assert hash(trail) == hash(trail)
    assert trail in {trail}
    assert {trail.statistics: trail.name}[trail.statistics] == "Walk"


def test_trail_statistics_cannot_be_modified(track) -> None:
    trail = build_trail("Walk", track)
    speed = trail.statistics.speed
    original = speed.all

    with pytest.raises(TypeError):
        speed.phases[Phase.ALL] = None  # type: ignore[index]
    with pytest.raises(FrozenInstanceError):
        speed.phases = {}  # type: ignore[misc]

    assert speed.all is original


def test_statistics_do_not_share_the_supplied_mapping(track) -> None:
    summary = build_trail("Walk", track).statistics.speed.all
    phases = {Phase.ALL: summary, Phase.ACTIVE: summary}
    stats = MetricStatistics(metric=Metric.SPEED, phases=phases)

    phases[Phase.ALL] = None

    assert stats.all is summary


def test_raw_and_enriched_points_compare_by_time() -> None:
    first, second = make_track(2)
    enriched = Waypoint.from_point(first, speed=4.2, is_active=True)

    assert enriched == first
    assert first == enriched
    assert hash(enriched) == hash(first)
    assert len({first, enriched}) == 1
    assert first < Waypoint.from_point(second)
    assert Waypoint.from_point(second) > first
    assert enriched <= first


def test_points_sort_by_time_across_types() -> None:
    points = make_track(3)
    mixed = [Waypoint.from_point(points[2]), points[0], Waypoint.from_point(points[1])]

    assert [p.time for p in sorted(mixed)] == [p.time for p in points]


def test_points_differing_only_in_coordinates_are_equal() -> None:
    point = make_track(1)[0]
    moved = RawPoint(
        time=point.time,
        longitude=point.longitude + 1.0,
        latitude=point.latitude,
        elevation=None,
    )
    later = RawPoint(
        time=point.time + timedelta(seconds=1),
        longitude=point.longitude,
        latitude=point.latitude,
    )

    assert moved == point
    assert later != point
    assert point != "not a point"
