"""Structural checks for points and trails.

Each ``check_*`` function returns the list of violated rules for one value;
:func:`validate_points` and :func:`validate_trail` bundle them into a
:class:`ValidationResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from .errors import TrailValidationError
from .models import Link, RawPoint, Trail, Waypoint

_LOG = logging.getLogger(__name__)

MIN_ELEVATION_M = -450.0
MAX_ELEVATION_M = 9000.0
MAX_ELEVATION_DIFFERENCE_M = 9450.0
MAX_RATING = 5

_COUNTRY_CODE = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True, slots=True)
class ValidationResult:
    violations: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        """Raise :class:`TrailValidationError` when any rule is broken."""

        if self.violations:
            raise TrailValidationError(self.violations)


def check_point(point: RawPoint, now: Optional[datetime] = None) -> List[str]:
    """Return the rules a raw GPS fix breaks."""

    issues: List[str] = []
    label = _label(point)
    if not -90.0 <= point.latitude <= 90.0:
        issues.append(f"{label}: latitude {point.latitude} outside [-90, 90]")
    if not -180.0 <= point.longitude < 180.0:
        issues.append(f"{label}: longitude {point.longitude} outside [-180, 180)")
    if point.elevation is not None and not (
        MIN_ELEVATION_M <= point.elevation <= MAX_ELEVATION_M
    ):
        issues.append(
            f"{label}: elevation {point.elevation} outside "
            f"[{MIN_ELEVATION_M:g}, {MAX_ELEVATION_M:g}]"
        )
    reference = now or _now_like(point.time)
    if point.time > reference:
        issues.append(f"{label}: time is in the future")
    return issues


def check_waypoint(point: Waypoint, now: Optional[datetime] = None) -> List[str]:
    """Return the rules an enriched waypoint breaks, raw fields included."""

    issues = check_point(point, now)
    label = _label(point)
    if point.time_difference < 0:
        issues.append(f"{label}: negative time difference")
    if point.distance < 0:
        issues.append(f"{label}: negative distance")
    if point.speed < 0:
        issues.append(f"{label}: negative speed")
    if not -90.0 <= point.grade <= 90.0:
        issues.append(f"{label}: grade {point.grade} outside [-90, 90]")
    if abs(point.elevation_difference) > MAX_ELEVATION_DIFFERENCE_M:
        issues.append(
            f"{label}: elevation difference {point.elevation_difference} too large"
        )
    return issues


def check_link(link: Link) -> List[str]:
    issues: List[str] = []
    if not link.label or not link.label.strip():
        issues.append("link label must not be blank")
    parsed = urlparse(link.location or "")
    if not parsed.scheme or not parsed.netloc:
        issues.append(f"link location {link.location!r} is not an absolute URL")
    return issues


def check_time_order(points: Sequence[RawPoint]) -> List[str]:
    issues: List[str] = []
    for previous, current in zip(points, points[1:]):
        if current.time <= previous.time:
            issues.append(f"{_label(current)}: time does not increase")
    return issues


def validate_points(points: Sequence[RawPoint]) -> ValidationResult:
    """Validate the raw input of a trail build."""

    issues: List[str] = []
    if not points:
        issues.append("trail must contain at least one point")
    now = datetime.now(timezone.utc)
    for point in points:
        issues.extend(check_point(point, _align(now, point.time)))
    return ValidationResult(tuple(issues))


def validate_trail(trail: Trail) -> ValidationResult:
    """Validate a fully built trail."""

    issues: List[str] = []
    if not trail.name or not trail.name.strip():
        issues.append("trail name must not be blank")
    if not trail.points:
        issues.append("trail must contain at least one point")
    issues.extend(check_time_order(trail.points))
    now = datetime.now(timezone.utc)
    for point in trail.points:
        issues.extend(check_waypoint(point, _align(now, point.time)))
    if not 0 <= trail.rating <= MAX_RATING:
        issues.append(f"rating {trail.rating} outside [0, {MAX_RATING}]")
    if trail.difficulty_rating < 0:
        issues.append("difficulty rating must not be negative")
    issues.extend(_check_countries(trail.countries))
    for link in trail.links:
        issues.extend(check_link(link))
    result = ValidationResult(tuple(issues))
    if not result.ok:
        _LOG.warning("Error validating trail %r: %s", trail.name, " ".join(issues))
    return result


def _check_countries(countries: Iterable[str]) -> List[str]:
    return [
        f"country code {code!r} is not ISO 3166 alpha-2"
        for code in countries
        if not _COUNTRY_CODE.match(code or "")
    ]


def _label(point: RawPoint) -> str:
    return f"point {point.time.isoformat()}"


def _now_like(moment: datetime) -> datetime:
    return _align(datetime.now(timezone.utc), moment)


def _align(now: datetime, moment: datetime) -> datetime:
    """Make ``now`` comparable with ``moment`` (naive points are taken as UTC)."""

    if moment.tzinfo is None:
        return now.replace(tzinfo=None)
    return now


__all__ = [
    "ValidationResult",
    "check_link",
    "check_point",
    "check_time_order",
    "check_waypoint",
    "validate_points",
    "validate_trail",
]
