"""Tests for TrailService batch resilience."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Tuple

import pytest

from trail_analysis import Activity, TrailBuilder
from trail_analysis.services import TrailService, TrailServiceConfig

from conftest import make_track


def test_trail_service_continues_when_a_track_fails(
    caplog: pytest.LogCaptureFixture,
) -> None:
    broken = make_track(10)
    broken[3] = replace(broken[3], latitude=123.0)
    tracks = {
        "Lake": make_track(30),
        "Ridge": make_track(40, start_lat=46.5),
        "Broken": broken,
    }
    progress: List[Tuple[str, int, int]] = []
    service = TrailService(TrailServiceConfig(builder=TrailBuilder(), max_workers=2))

    with caplog.at_level(logging.WARNING, logger="TrailService"):
        result = service.process(tracks, lambda *args: progress.append(args))

    assert set(result.trails) == {"Lake", "Ridge"}
    assert result.trails["Lake"].name == "Lake"
    assert result.trails["Ridge"].activity is Activity.HIKING
    assert set(result.failures) == {"Broken"}
    assert "latitude" in result.failures["Broken"]
    assert "invalid" in caplog.text.lower()
    assert sorted(done for _, done, _ in progress) == [1, 2, 3]
    assert all(total == 3 for _, _, total in progress)


def test_unexpected_errors_are_reported(caplog: pytest.LogCaptureFixture) -> None:
    class _ExplodingBuilder(TrailBuilder):
        def build(self, name, points, **kwargs):
            raise KeyError("boom")

    service = TrailService(TrailServiceConfig(builder=_ExplodingBuilder()))

    with caplog.at_level(logging.ERROR, logger="TrailService"):
        result = service.process({"Any": make_track(5)})

    assert result.trails == {}
    assert "Any" in result.failures
    assert "unexpected error" in caplog.text.lower()


def test_empty_batch() -> None:
    service = TrailService(TrailServiceConfig(builder=TrailBuilder()))

    result = service.process({})

    assert result.trails == {}
    assert result.failures == {}
