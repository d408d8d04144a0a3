"""MorphOrchestrator: walker -> tangents -> interpolator -> optional stitcher."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Optional

from secmorph.core.section_store import SectionStore
from secmorph.core.tasks import CancellationToken, MorphTask, ProgressCallback, is_cancelled, submit
from .config import MorphConfig
from .contour_matcher import ContourMatcher
from .contour_path import ContourPath
from .interpolator import MorphInterpolator, MorphSeries
from .section_walker import SectionGraphWalker, WalkResult
from .stitcher import Mesh, StitchResult, SurfaceStitcher

logger = logging.getLogger(__name__)


@dataclass
class MorphResult:
    paths: list[ContourPath] = field(default_factory=list)
    series: Optional[MorphSeries] = None
    mesh: Optional[Mesh] = None
    cancelled: bool = False
    warnings: list[str] = field(default_factory=list)


class MorphOrchestrator:
    """Runs the full morph for one section store under a MorphConfig."""

    def __init__(self, config: MorphConfig | None = None):
        self.config = config or MorphConfig()
        self.matcher = ContourMatcher(self.config.weight_threshold, self.config.centroid_mode)

    def map_sections(
        self,
        store: SectionStore,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> WalkResult:
        walker = SectionGraphWalker(self.matcher, self.config.allow_multi_contour)
        return walker.run(store, cancel=cancel, progress=progress)

    def interpolate(
        self,
        paths: list[ContourPath],
        store: SectionStore,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> MorphSeries:
        cfg = self.config
        interpolator = MorphInterpolator(
            iterations=cfg.iterations,
            apply_spline=cfg.apply_spline,
            angle_threshold=cfg.angle_threshold,
            length_threshold=cfg.length_threshold,
            spacing=store.spacing,
            end_spline_factor=cfg.end_spline_factor,
            origin=store.distance_of(0),
            name=cfg.shape_name,
        )
        return interpolator.interpolate_paths(paths, cancel=cancel, progress=progress)

    def stitch(
        self,
        paths: list[ContourPath],
        store: SectionStore,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> StitchResult:
        return SurfaceStitcher(store).stitch(paths, cancel=cancel, progress=progress)

    def run(
        self,
        store: SectionStore,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> MorphResult:
        """Full morph. A cancelled run returns what was built so far with ``cancelled`` set."""
        result = MorphResult()
        if is_cancelled(cancel):
            logger.info("Morph cancelled before start")
            result.cancelled = True
            return result

        t0 = time.time()
        walk = self.map_sections(store, cancel, progress)
        result.paths = walk.paths
        if walk.cancelled:
            result.cancelled = True
            return result

        series = self.interpolate(walk.paths, store, cancel, progress)
        result.series = series
        result.warnings.extend(series.warnings)
        if series.cancelled:
            result.cancelled = True
            return result

        if self.config.generate_surface:
            # the surface follows the morphed stack, intermediates included
            morphed = series.to_section_store()
            morphed_walk = self.map_sections(morphed, cancel, progress)
            if morphed_walk.cancelled:
                result.cancelled = True
                return result
            stitched = self.stitch(morphed_walk.paths, morphed, cancel, progress)
            result.mesh = stitched.mesh
            result.warnings.extend(stitched.warnings)
            result.cancelled = stitched.cancelled

        logger.info(
            f"Morph '{self.config.shape_name}' done in {time.time() - t0:.1f}s: "
            f"{len(result.paths)} paths, {series.contour_count} contours"
            + (f", {result.mesh.num_faces} faces" if result.mesh is not None else "")
        )
        return result

    def submit(
        self,
        store: SectionStore,
        executor: Executor | None = None,
        progress: Optional[ProgressCallback] = None,
    ) -> MorphTask:
        """Run ``run(store)`` in the background; cancel through the returned task."""
        return submit(self.run, store, executor=executor, progress=progress)
