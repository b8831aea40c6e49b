"""Central error types used across the application."""

from __future__ import annotations

from typing import Iterable


class TrailError(RuntimeError):
    """Base error for trail analysis failures."""


class TrailValidationError(TrailError):
    """Raised when a trail or its points break a structural invariant."""

    def __init__(self, violations: Iterable[str]):
        self.violations = tuple(violations)
        super().__init__("; ".join(self.violations) or "Invalid trail")


class ElevationServiceError(TrailError):
    """Raised when the elevation service cannot provide usable data."""


class GeocodingError(TrailError):
    """Raised when the reverse geocoding service cannot provide a country."""


__all__ = [
    "TrailError",
    "TrailValidationError",
    "ElevationServiceError",
    "GeocodingError",
]
