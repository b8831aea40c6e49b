"""GPS trail analysis package."""

from .errors import TrailError, TrailValidationError
from .models import (
    Activity,
    Level,
    Link,
    Metric,
    Phase,
    RawPoint,
    Trail,
    TrailStatistics,
    Waypoint,
)
from .refinement import (
    RefinementSettings,
    TrailBuilder,
    TrailBuilderConfig,
    build_trail,
)

__all__ = [
    "Activity",
    "Level",
    "Link",
    "Metric",
    "Phase",
    "RawPoint",
    "RefinementSettings",
    "Trail",
    "TrailBuilder",
    "TrailBuilderConfig",
    "TrailError",
    "TrailStatistics",
    "TrailValidationError",
    "Waypoint",
    "build_trail",
]
