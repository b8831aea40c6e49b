"""Batch trail construction.

Trails are independent from each other, so a batch of tracks is built on a
thread pool. A track that fails to build is logged and reported without
stopping the others.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, Iterable, List, Mapping

from .. import config
from ..errors import TrailValidationError
from ..models import RawPoint, Trail
from ..refinement import RefinementSettings, TrailBuilder, TrailBuilderConfig
from .elevation import MapQuestElevationFixer
from .geocoding import MapQuestCountryGuesser

ProgressCallback = Callable[[str, int, int], None]


def default_builder() -> TrailBuilder:
    """Return a builder wired to the MapQuest services and configured defaults."""

    return TrailBuilder(
        TrailBuilderConfig(
            settings=RefinementSettings.from_config(),
            fix_elevation=MapQuestElevationFixer(),
            guess_countries=MapQuestCountryGuesser(),
        )
    )


@dataclass(slots=True)
class TrailServiceConfig:
    builder: TrailBuilder | None = None
    max_workers: int = config.MAX_WORKERS
    logger: logging.Logger | None = None


@dataclass(slots=True)
class TrailBatchResult:
    trails: Dict[str, Trail] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)


class TrailService:
    def __init__(self, config: TrailServiceConfig | None = None):
        self.config = config or TrailServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._builder = self.config.builder or default_builder()

    def process(
        self,
        tracks: Mapping[str, Iterable[RawPoint]],
        progress: ProgressCallback | None = None,
    ) -> TrailBatchResult:
        """Build one trail per named track; the name becomes the trail name."""

        result = TrailBatchResult()
        if not tracks:
            return result
        workers = max(1, min(self.config.max_workers, len(tracks)))
        self._log.info("Building %d trails with %d workers", len(tracks), workers)
        total = len(tracks)
        done = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_map = {
                executor.submit(self._builder.build, name, list(points)): name
                for name, points in tracks.items()
            }
            for future in as_completed(future_map):
                name = future_map[future]
                done += 1
                try:
                    trail = future.result()
                except TrailValidationError as exc:
                    self._log.warning("Trail %s is invalid and was skipped: %s", name, exc)
                    result.failures[name] = str(exc)
                except Exception as exc:
                    self._log.error(
                        "Trail %s build failed due to unexpected error: %s",
                        name,
                        exc,
                        exc_info=True,
                    )
                    result.failures[name] = str(exc)
                else:
                    result.trails[name] = trail
                if progress is not None:
                    progress(name, done, total)
        if result.failures:
            failed: List[str] = sorted(result.failures)
            self._log.warning(
                "Failed to build %d of %d trails (%s)",
                len(failed),
                total,
                ", ".join(failed),
            )
        self._log.info("Built %d trails", len(result.trails))
        return result


__all__ = [
    "TrailBatchResult",
    "TrailService",
    "TrailServiceConfig",
    "default_builder",
]
