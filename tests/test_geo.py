"""Tests for the haversine distance and grade helpers."""

from __future__ import annotations

import pytest

from trail_analysis.geo import grade_degrees, haversine_distance


def test_haversine_distance_between_close_points() -> None:
    first = (7.9631000385, 50.1181330718)
    second = (7.9630940873, 50.1181969419)

    assert haversine_distance(first, second) == pytest.approx(7.064232421078554, abs=1e-6)


def test_haversine_distance_is_symmetric() -> None:
    first = (47.0, 8.0)
    second = (47.5, 8.7)

    assert haversine_distance(first, second) == pytest.approx(
        haversine_distance(second, first)
    )


def test_haversine_distance_of_same_point_is_zero() -> None:
    assert haversine_distance((45.0, 7.0), (45.0, 7.0)) == 0.0


def test_one_degree_of_latitude() -> None:
    # 2 * pi * 6371 km / 360
    assert haversine_distance((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111194.93, abs=0.01)


@pytest.mark.parametrize(
    ("elevation_difference", "distance", "expected"),
    [
        (10.0, 10.0, 45.0),
        (-10.0, 10.0, -45.0),
        (0.0, 25.0, 0.0),
        (5.0, 0.0, 0.0),
    ],
)
def test_grade_degrees(elevation_difference: float, distance: float, expected: float) -> None:
    assert grade_degrees(elevation_difference, distance) == pytest.approx(expected)
