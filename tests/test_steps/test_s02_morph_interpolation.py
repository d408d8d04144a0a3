"""Tests for S02: Morph interpolation step."""

from pathlib import Path

import pytest

from secmorph.steps.s01_contour_matching.config import ContourMatchingConfig
from secmorph.steps.s01_contour_matching.contracts import ContourMatchingInput
from secmorph.steps.s01_contour_matching.step import ContourMatchingStep
from secmorph.steps.s02_morph_interpolation.config import MorphInterpolationConfig
from secmorph.steps.s02_morph_interpolation.contracts import MorphInterpolationInput
from secmorph.steps.s02_morph_interpolation.step import MorphInterpolationStep
from secmorph.utils.io import load_section_stack


def _run_s01(data_root: Path, sections_file: Path):
    step = ContourMatchingStep(config=ContourMatchingConfig(), data_root=data_root)
    return step.execute(ContourMatchingInput(sections_file=sections_file))


class TestMorphInterpolationContracts:
    def test_config_defaults(self):
        cfg = MorphInterpolationConfig()
        assert cfg.iterations == 1
        assert cfg.apply_spline is False
        assert cfg.end_spline_factor == 1.0
        assert cfg.length_threshold == 0.1

    def test_input_accepts_s01_output(self, data_root: Path, sample_sections_json: Path):
        s01_out = _run_s01(data_root, sample_sections_json)
        inputs = MorphInterpolationInput(**s01_out.model_dump())
        assert inputs.matches_file == s01_out.matches_file


class TestMorphInterpolationStep:
    def test_validate_missing_matches(self, data_root: Path, sample_sections_json: Path):
        step = MorphInterpolationStep(config=MorphInterpolationConfig(), data_root=data_root)
        inputs = MorphInterpolationInput(
            sections_file=sample_sections_json, matches_file=data_root / "nope.json"
        )
        assert step.validate_inputs(inputs) is False

    def test_run(self, data_root: Path, sample_sections_json: Path):
        s01_out = _run_s01(data_root, sample_sections_json)
        step = MorphInterpolationStep(config=MorphInterpolationConfig(iterations=1), data_root=data_root)
        output = step.execute(MorphInterpolationInput(**s01_out.model_dump()))

        assert output.sections_file.exists()
        assert output.sections_file.parent == data_root / "interim" / "s02_morph_interpolation"
        # sections 0, 1, 3 with one intermediate per unit gap (two across the 1 -> 3 gap)
        assert output.num_sections == 7
        assert output.num_contours == 7
        assert output.sub_spacing == pytest.approx(0.25)
        assert output.warnings == []

        morphed = load_section_stack(output.sections_file)
        assert morphed.spacing == pytest.approx(0.25)
        assert morphed.section_indices() == list(range(7))
        assert morphed.distance_of(6) == pytest.approx(1.5)

    def test_spline_run(self, data_root: Path, sample_sections_json: Path):
        s01_out = _run_s01(data_root, sample_sections_json)
        cfg = MorphInterpolationConfig(iterations=2, apply_spline=True, end_spline_factor=0.5)
        output = MorphInterpolationStep(config=cfg, data_root=data_root).execute(
            MorphInterpolationInput(**s01_out.model_dump())
        )
        # 3 sub-steps per gap over 3 unit gaps, plus the last section
        assert output.num_sections == 10
