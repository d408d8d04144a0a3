"""Step 01: Contour matching - section stack -> morph paths with vertex matches.

Walks the section stack in ascending order, matches every contour with its
counterpart on the previous populated section and writes the resulting paths
to ``interim/s01_contour_matching/matches.json``.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from secmorph.core.contracts import StepMeta
from secmorph.core.step_base import BaseStep
from secmorph.morph.contour_matcher import ContourMatcher
from secmorph.morph.contour_path import paths_to_dict
from secmorph.morph.section_walker import SectionGraphWalker
from secmorph.utils.io import load_section_stack, save_json
from .config import ContourMatchingConfig
from .contracts import ContourMatchingInput, ContourMatchingOutput

logger = logging.getLogger(__name__)


class ContourMatchingStep(BaseStep[ContourMatchingInput, ContourMatchingOutput, ContourMatchingConfig]):
    name: ClassVar[str] = "contour_matching"
    input_type: ClassVar = ContourMatchingInput
    output_type: ClassVar = ContourMatchingOutput
    config_type: ClassVar = ContourMatchingConfig

    def validate_inputs(self, inputs: ContourMatchingInput) -> bool:
        if not inputs.sections_file.exists():
            logger.error(f"Section stack not found: {inputs.sections_file}")
            return False
        return True

    def run(self, inputs: ContourMatchingInput) -> ContourMatchingOutput:
        store = load_section_stack(inputs.sections_file)
        matcher = ContourMatcher(self.config.weight_threshold, self.config.centroid_mode)
        walk = SectionGraphWalker(matcher, self.config.allow_multi_contour).run(store)

        output_dir = self.interim_dir("s01_contour_matching")
        data = paths_to_dict(walk.paths)
        data["meta"] = StepMeta(step_name=self.name, params=self.config.model_dump()).model_dump()
        matches_file = save_json(data, output_dir / "matches.json")

        logger.info(
            f"Matched {walk.num_matches} contour pairs into {len(walk.paths)} paths "
            f"({walk.skipped_contours} degenerate contours skipped)"
        )
        return ContourMatchingOutput(
            sections_file=inputs.sections_file,
            matches_file=matches_file,
            num_paths=len(walk.paths),
            num_matches=walk.num_matches,
            skipped_contours=walk.skipped_contours,
        )
