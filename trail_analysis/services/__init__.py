"""Service layer package.

Exports the MapQuest collaborators of the refinement loop and the batch
trail service.
"""

from .elevation import MapQuestElevationFixer
from .geocoding import MapQuestCountryGuesser
from .trail_service import (
    TrailBatchResult,
    TrailService,
    TrailServiceConfig,
    default_builder,
)

__all__ = [
    "MapQuestElevationFixer",
    "MapQuestCountryGuesser",
    "TrailBatchResult",
    "TrailService",
    "TrailServiceConfig",
    "default_builder",
]
