"""Trail construction: elevation fix, augmentation, statistics and cleanup.

A trail is analysed in passes. The first pass corrects elevation data (best
effort) and drops idle points; every pass augments the points, computes
statistics and looks for speed and grade outliers. A bad GPS fix corrupts the
metrics of both itself and its successor, so each outlier is removed together
with its direct neighbours before the next pass. The loop ends when no outlier
is left, when outliers are kept on purpose, or when the pass budget is spent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple
from uuid import UUID, uuid4

from . import config
from .activity import difficulty_rating as rate_difficulty
from .activity import guess_activity
from .augmenter import augment_points
from .errors import TrailValidationError
from .models import (
    Activity,
    Level,
    Link,
    RawPoint,
    Trail,
    TrailStatistics,
    Waypoint,
)
from .statistics import compute_trail_statistics
from .validation import validate_points, validate_trail

_LOG = logging.getLogger(__name__)

ElevationFixer = Callable[[Sequence[RawPoint]], Sequence[RawPoint]]
CountryGuesser = Callable[[Sequence[Waypoint]], Iterable[str]]


def keep_elevation(points: Sequence[RawPoint]) -> Sequence[RawPoint]:
    return points


def no_countries(points: Sequence[Waypoint]) -> Set[str]:
    return set()


@dataclass(frozen=True, slots=True)
class RefinementSettings:
    """Knobs of the refinement loop.

    ``iteration_budget`` caps the number of passes; 0 and 1 both mean a
    single pass without any cleanup.
    """

    iteration_budget: int = 3
    keep_outliers: bool = False
    keep_idle_points: bool = False
    user_level: Level = Level.INTERMEDIATE

    def __post_init__(self) -> None:
        if self.iteration_budget < 0:
            raise ValueError("iteration_budget must not be negative")
        object.__setattr__(self, "user_level", Level.parse(self.user_level))

    @classmethod
    def from_config(cls) -> "RefinementSettings":
        """Build settings from the environment-derived defaults in ``config``."""

        return cls(
            iteration_budget=config.CLEANUP_PASSES,
            keep_outliers=config.KEEP_OUTLIERS,
            keep_idle_points=config.KEEP_IDLE_POINTS,
            user_level=Level.parse(config.USER_LEVEL),
        )


@dataclass(frozen=True, slots=True)
class RefinementPass:
    iteration: int
    point_count: int
    outlier_count: int
    removed_count: int


@dataclass(frozen=True, slots=True)
class RefinementOutcome:
    points: Tuple[Waypoint, ...]
    statistics: Optional[TrailStatistics]
    passes: Tuple[RefinementPass, ...]


@dataclass(slots=True)
class TrailBuilderConfig:
    settings: RefinementSettings = field(default_factory=RefinementSettings)
    fix_elevation: ElevationFixer = keep_elevation
    guess_countries: CountryGuesser = no_countries
    logger: logging.Logger | None = None


class TrailBuilder:
    """Build immutable, validated :class:`Trail` values out of raw GPS fixes.

    The builder holds no per-trail state, so one instance can build many
    trails concurrently.
    """

    def __init__(self, config: TrailBuilderConfig | None = None):
        self.config = config or TrailBuilderConfig()
        self._log = self.config.logger or _LOG

    def build(
        self,
        name: str,
        points: Iterable[RawPoint],
        *,
        description: str | None = None,
        links: Iterable[Link] = (),
        activity: Activity | None = None,
        difficulty_rating: int | None = None,
        countries: Iterable[str] | None = None,
        rating: int = 0,
        trail_id: UUID | None = None,
    ) -> Trail:
        """Analyse ``points`` and return a validated trail.

        Activity, difficulty rating and countries are only computed when not
        supplied. Raises :class:`TrailValidationError` when the input or the
        resulting trail breaks a structural invariant.
        """

        outcome = self.refine(points)
        waypoints = outcome.points
        statistics = outcome.statistics
        country_codes = {c.upper() for c in countries or ()}
        if statistics is not None:
            if not country_codes:
                country_codes = self._guess_countries(waypoints)
            if activity is None:
                activity = guess_activity(statistics.distance, statistics.speed)
            if difficulty_rating is None:
                level = self.config.settings.user_level
                self._log.info("User level set to %s", level.value)
                difficulty_rating = rate_difficulty(
                    activity,
                    level,
                    statistics.distance,
                    statistics.elevation_difference,
                    waypoints[0].time,
                    waypoints[-1].time,
                )
        trail = Trail(
            id=trail_id or uuid4(),
            name=name,
            points=waypoints,
            statistics=statistics,
            activity=activity,
            difficulty_rating=difficulty_rating or 0,
            countries=frozenset(country_codes),
            rating=rating,
            description=description,
            links=tuple(links),
        )
        validate_trail(trail).raise_for_violations()
        self._log.debug(
            "Built trail %r with %d points (activity=%s, difficulty=%d)",
            trail.name,
            len(trail.points),
            trail.activity.value if trail.activity else None,
            trail.difficulty_rating,
        )
        return trail

    def rebuild(self, trail: Trail, points: Iterable[RawPoint] | None = None) -> Trail:
        """Build a new trail from ``points``, keeping the identity of ``trail``."""

        return self.build(
            trail.name,
            trail.points if points is None else points,
            description=trail.description,
            links=trail.links,
            activity=trail.activity,
            difficulty_rating=trail.difficulty_rating,
            countries=trail.countries,
            rating=trail.rating,
            trail_id=trail.id,
        )

    def refine(self, points: Iterable[RawPoint]) -> RefinementOutcome:
        """Run the analysis passes and return the final points and statistics."""

        settings = self.config.settings
        current: Sequence[RawPoint] = _sorted_unique(points)
        validate_points(current).raise_for_violations()
        budget = max(1, settings.iteration_budget)
        passes: List[RefinementPass] = []
        iteration = 0
        while True:
            started = time.perf_counter()
            if iteration == 0:
                current = self._fix_elevation(current)
            elevation_done = time.perf_counter()
            waypoints = augment_points(current)
            if iteration == 0 and not settings.keep_idle_points:
                waypoints = self._drop_idle_points(waypoints)
            augment_done = time.perf_counter()
            statistics = compute_trail_statistics(waypoints)
            stats_done = time.perf_counter()
            self._log.info(
                "Performed trail analysis pass %d in %.0f ms (elevation data: %.0f"
                " - augment points: %.0f - compute stats: %.0f)",
                iteration,
                (stats_done - started) * 1000,
                (elevation_done - started) * 1000,
                (augment_done - elevation_done) * 1000,
                (stats_done - augment_done) * 1000,
            )
            outliers = _outliers(statistics)
            if settings.keep_outliers or not outliers or iteration + 1 >= budget:
                passes.append(RefinementPass(iteration, len(waypoints), len(outliers), 0))
                return RefinementOutcome(waypoints, statistics, tuple(passes))

            marked = _with_neighbours(waypoints, outliers)
            passes.append(
                RefinementPass(iteration, len(waypoints), len(outliers), len(marked))
            )
            self._log.info(
                "%d points (outliers and their neighbours) have been removed. "
                "The analysis will be performed again.",
                len(marked),
            )
            current = [p for p in waypoints if p.time not in marked]
            iteration += 1

    def _fix_elevation(self, points: Sequence[RawPoint]) -> Sequence[RawPoint]:
        if not points:
            return points
        try:
            fixed = list(self.config.fix_elevation(points))
        except Exception as exc:
            self._log.warning(
                "Elevation correction failed; initial elevation data will be used: %s",
                exc,
            )
            return points
        if len(fixed) != len(points):
            self._log.warning(
                "Elevation correction returned %d points instead of %d; "
                "initial elevation data will be used",
                len(fixed),
                len(points),
            )
            return points
        return fixed

    def _drop_idle_points(self, waypoints: Sequence[Waypoint]) -> Tuple[Waypoint, ...]:
        active = [p for p in waypoints if p.is_active]
        self._log.info("Removed %d idle points from trail", len(waypoints) - len(active))
        return augment_points(active)

    def _guess_countries(self, waypoints: Sequence[Waypoint]) -> Set[str]:
        try:
            return {code.upper() for code in self.config.guess_countries(waypoints)}
        except Exception as exc:
            self._log.warning("Country guessing failed: %s", exc)
            return set()


def build_trail(
    name: str,
    points: Iterable[RawPoint],
    config: TrailBuilderConfig | None = None,
    **options,
) -> Trail:
    """Shortcut for ``TrailBuilder(config).build(name, points, **options)``."""

    return TrailBuilder(config).build(name, points, **options)


def _sorted_unique(points: Iterable[RawPoint]) -> List[RawPoint]:
    """Sort points by time, keeping the first fix recorded for each instant."""

    unique: Dict[object, RawPoint] = {}
    for point in points:
        unique.setdefault(point.time, point)
    try:
        ordered = sorted(unique)
    except TypeError as exc:
        raise TrailValidationError(
            ["points mix naive and timezone-aware times"]
        ) from exc
    return [unique[moment] for moment in ordered]


def _outliers(statistics: Optional[TrailStatistics]) -> FrozenSet[Waypoint]:
    if statistics is None:
        return frozenset()
    return statistics.speed.outliers | statistics.grade.outliers


def _with_neighbours(
    waypoints: Sequence[Waypoint], outliers: Iterable[Waypoint]
) -> Set[object]:
    """Return the times of the outliers and of their direct neighbours."""

    index_by_time = {p.time: i for i, p in enumerate(waypoints)}
    last = len(waypoints) - 1
    marked: Set[object] = set()
    for outlier in outliers:
        index = index_by_time.get(outlier.time)
        if index is None:
            continue
        marked.add(outlier.time)
        if index > 0:
            marked.add(waypoints[index - 1].time)
        if index < last:
            marked.add(waypoints[index + 1].time)
    return marked


__all__ = [
    "CountryGuesser",
    "ElevationFixer",
    "RefinementOutcome",
    "RefinementPass",
    "RefinementSettings",
    "TrailBuilder",
    "TrailBuilderConfig",
    "build_trail",
    "keep_elevation",
    "no_countries",
]
