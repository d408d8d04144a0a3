"""Step 02: Morph interpolation - matched paths -> dense section stack.

Reads the paths from s01, synthesizes ``iterations`` intermediate contours per
section gap and writes the result as a new section stack whose spacing is
``spacing / (iterations + 1)``.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from secmorph.core.step_base import BaseStep
from secmorph.morph.contour_path import paths_from_dict
from secmorph.morph.interpolator import MorphInterpolator
from secmorph.utils.io import load_json, load_section_stack, save_section_stack
from .config import MorphInterpolationConfig
from .contracts import MorphInterpolationInput, MorphInterpolationOutput

logger = logging.getLogger(__name__)


class MorphInterpolationStep(
    BaseStep[MorphInterpolationInput, MorphInterpolationOutput, MorphInterpolationConfig]
):
    name: ClassVar[str] = "morph_interpolation"
    input_type: ClassVar = MorphInterpolationInput
    output_type: ClassVar = MorphInterpolationOutput
    config_type: ClassVar = MorphInterpolationConfig

    def validate_inputs(self, inputs: MorphInterpolationInput) -> bool:
        for label, path in (("Section stack", inputs.sections_file), ("Matches", inputs.matches_file)):
            if not path.exists():
                logger.error(f"{label} not found: {path}")
                return False
        return True

    def run(self, inputs: MorphInterpolationInput) -> MorphInterpolationOutput:
        store = load_section_stack(inputs.sections_file)
        paths = paths_from_dict(load_json(inputs.matches_file))
        logger.info(f"Loaded {len(paths)} paths from {inputs.matches_file}")

        cfg = self.config
        interpolator = MorphInterpolator(
            iterations=cfg.iterations,
            apply_spline=cfg.apply_spline,
            angle_threshold=cfg.angle_threshold,
            length_threshold=cfg.length_threshold,
            spacing=store.spacing,
            end_spline_factor=cfg.end_spline_factor,
            origin=store.origin,
            name=cfg.shape_name,
        )
        series = interpolator.interpolate_paths(paths)

        morphed = series.to_section_store()
        output_dir = self.interim_dir("s02_morph_interpolation")
        sections_file = save_section_stack(morphed, output_dir / "sections.json")

        return MorphInterpolationOutput(
            sections_file=sections_file,
            num_sections=len(morphed),
            num_contours=morphed.contour_count,
            sub_spacing=series.sub_spacing,
            warnings=series.warnings,
        )
