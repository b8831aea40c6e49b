"""Immutable value types describing GPS points, statistics and trails."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple
from uuid import UUID

LatLon = Tuple[float, float]


class Metric(str, Enum):
    TIME = "time"
    DISTANCE = "distance"
    ELEVATION = "elevation"
    ELEVATION_DIFFERENCE = "elevation_difference"
    SPEED = "speed"
    GRADE = "grade"


class Phase(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class Level(str, Enum):
    """Physical condition of a person, or demand of a trail."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def parse(cls, value: "str | Level") -> "Level":
        if isinstance(value, Level):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown level: {value!r}") from None


class Activity(str, Enum):
    """Kind of outdoor activity recorded in a trail."""

    HIKING = "hiking"
    JOGGING = "jogging"
    BIKING = "biking"

    @property
    def reference_speed(self) -> float:
        """Expected average speed (km/h) while moving."""

        return _REFERENCE_SPEEDS_KMH[self]


_REFERENCE_SPEEDS_KMH: Dict[Activity, float] = {
    Activity.HIKING: 5.0,
    Activity.JOGGING: 9.0,
    Activity.BIKING: 15.0,
}


@total_ordering
@dataclass(frozen=True, eq=False, slots=True)
class RawPoint:
    """A GPS fix as recorded by the device.

    Points are compared, sorted and hashed by ``time`` only, across raw and
    enriched points alike, so a set of points never holds two fixes for the
    same instant.
    """

    time: datetime
    longitude: float
    latitude: float
    elevation: Optional[float] = None

    @property
    def latlon(self) -> LatLon:
        return self.latitude, self.longitude

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RawPoint):
            return NotImplemented
        return self.time == other.time

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, RawPoint):
            return NotImplemented
        return self.time < other.time

    def __hash__(self) -> int:
        return hash(self.time)


@dataclass(frozen=True, eq=False, slots=True)
class Waypoint(RawPoint):
    """A GPS fix enriched with metrics derived from its predecessor."""

    distance: float = 0.0
    elevation_difference: float = 0.0
    grade: float = 0.0
    speed: float = 0.0
    time_difference: int = 0
    is_active: bool = False

    @classmethod
    def from_point(cls, point: RawPoint, **derived: object) -> "Waypoint":
        """Build a waypoint from the raw fields of ``point`` plus derived metrics."""

        return cls(
            time=point.time,
            longitude=point.longitude,
            latitude=point.latitude,
            elevation=point.elevation,
            **derived,  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class SummaryStats:
    """Descriptive statistics for one metric over one group of points."""

    count: int
    mean: float
    stddev: float
    sum: float
    min: float
    max: float


@dataclass(frozen=True, slots=True)
class MetricStatistics:
    """Grouped statistics and outliers for a single metric."""

    metric: Metric
    phases: Mapping[Phase, SummaryStats] = field(hash=False)
    outliers: FrozenSet[Waypoint] = frozenset()

    def __post_init__(self) -> None:
        # Read-only copy: callers keep no handle on the stored mapping.
        object.__setattr__(self, "phases", MappingProxyType(dict(self.phases)))

    def get(self, phase: Phase) -> Optional[SummaryStats]:
        return self.phases.get(phase)

    @property
    def all(self) -> SummaryStats:
        return self.phases[Phase.ALL]

    @property
    def active(self) -> SummaryStats:
        return self.phases[Phase.ACTIVE]

    @property
    def up(self) -> SummaryStats:
        return self.phases[Phase.UP]

    @property
    def down(self) -> SummaryStats:
        return self.phases[Phase.DOWN]

    @property
    def flat(self) -> Optional[SummaryStats]:
        # Elevation metrics are only split into up and down.
        return self.phases.get(Phase.FLAT)


@dataclass(frozen=True, slots=True)
class TrailStatistics:
    time: MetricStatistics
    distance: MetricStatistics
    elevation: MetricStatistics
    elevation_difference: MetricStatistics
    speed: MetricStatistics
    grade: MetricStatistics

    def for_metric(self, metric: Metric) -> MetricStatistics:
        return getattr(self, metric.value)


@dataclass(frozen=True, slots=True)
class Link:
    label: str
    location: str


@dataclass(frozen=True, slots=True)
class Trail:
    """A validated, analysed trail. Built by :class:`TrailBuilder` only."""

    id: UUID
    name: str
    points: Tuple[Waypoint, ...]
    statistics: Optional[TrailStatistics]
    activity: Optional[Activity]
    difficulty_rating: int = 0
    countries: FrozenSet[str] = frozenset()
    rating: int = 0
    description: Optional[str] = None
    links: Tuple[Link, ...] = ()

    @property
    def start(self) -> datetime:
        return self.points[0].time

    @property
    def end(self) -> datetime:
        return self.points[-1].time

    @property
    def outliers(self) -> FrozenSet[Waypoint]:
        """Speed and grade outliers still present in the trail."""

        if self.statistics is None:
            return frozenset()
        return self.statistics.speed.outliers | self.statistics.grade.outliers


__all__ = [
    "Activity",
    "LatLon",
    "Level",
    "Link",
    "Metric",
    "MetricStatistics",
    "Phase",
    "RawPoint",
    "SummaryStats",
    "Trail",
    "TrailStatistics",
    "Waypoint",
]
