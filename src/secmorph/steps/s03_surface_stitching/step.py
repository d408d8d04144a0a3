"""Step 03: Surface stitching - section stack -> welded triangle mesh.

Matches the stack again (the morphed stack from s02 has its own sections) and
triangulates the band between every matched pair. Writes
``interim/s03_surface_stitching/mesh.json``.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from secmorph.core.step_base import BaseStep
from secmorph.morph.contour_matcher import ContourMatcher
from secmorph.morph.section_walker import SectionGraphWalker
from secmorph.morph.stitcher import SurfaceStitcher
from secmorph.utils.io import load_section_stack, save_mesh_document
from .config import SurfaceStitchingConfig
from .contracts import SurfaceStitchingInput, SurfaceStitchingOutput

logger = logging.getLogger(__name__)


class SurfaceStitchingStep(BaseStep[SurfaceStitchingInput, SurfaceStitchingOutput, SurfaceStitchingConfig]):
    name: ClassVar[str] = "surface_stitching"
    input_type: ClassVar = SurfaceStitchingInput
    output_type: ClassVar = SurfaceStitchingOutput
    config_type: ClassVar = SurfaceStitchingConfig

    def validate_inputs(self, inputs: SurfaceStitchingInput) -> bool:
        if not inputs.sections_file.exists():
            logger.error(f"Section stack not found: {inputs.sections_file}")
            return False
        return True

    def run(self, inputs: SurfaceStitchingInput) -> SurfaceStitchingOutput:
        store = load_section_stack(inputs.sections_file)
        matcher = ContourMatcher(self.config.weight_threshold, self.config.centroid_mode)
        walk = SectionGraphWalker(matcher, self.config.allow_multi_contour).run(store)
        stitched = SurfaceStitcher(store).stitch(walk.paths)
        mesh = stitched.mesh

        output_dir = self.interim_dir("s03_surface_stitching")
        mesh_file = save_mesh_document(mesh.to_document(), output_dir / "mesh.json")

        is_watertight = None
        euler_number = None
        if self.config.compute_stats and not mesh.is_empty:
            tm = mesh.to_trimesh()
            is_watertight = bool(tm.is_watertight)
            euler_number = int(tm.euler_number)
            logger.info(f"Mesh watertight={is_watertight}, euler={euler_number}")

        return SurfaceStitchingOutput(
            mesh_file=mesh_file,
            num_vertices=mesh.num_vertices,
            num_faces=mesh.num_faces,
            surface_area=mesh.surface_area,
            skipped_ribbons=stitched.skipped,
            is_watertight=is_watertight,
            euler_number=euler_number,
        )
