"""Tests for the pipeline runner and shared contracts."""

from pathlib import Path

import pytest
import yaml

from secmorph.core.contracts import PipelineConfig, StepEntry, StepMeta
from secmorph.core.pipeline_runner import (
    import_step_class,
    load_pipeline_config,
    load_step_config,
    resolve_config_file,
    save_step_config,
)
from secmorph.steps.s01_contour_matching.config import ContourMatchingConfig
from secmorph.steps.s02_morph_interpolation.config import MorphInterpolationConfig


class TestContracts:
    def test_pipeline_config_defaults(self):
        cfg = PipelineConfig()
        assert cfg.project_name == "secmorph_project"
        assert cfg.steps == []

    def test_step_entry(self):
        entry = StepEntry(name="s01", module="secmorph.steps.s01_contour_matching", config_file="x.yaml")
        assert entry.enabled is True
        assert entry.depends_on == []
        assert entry.inputs == {}

    def test_step_meta(self):
        meta = StepMeta(step_name="contour_matching", params={"weight_threshold": 0.8})
        assert meta.elapsed_seconds == 0.0


class TestLoadConfig:
    def test_load_pipeline_config(self, tmp_path: Path):
        config = {
            "project_name": "duct",
            "data_root": str(tmp_path / "data"),
            "steps": [
                {
                    "name": "s01_contour_matching",
                    "module": "secmorph.steps.s01_contour_matching",
                    "config_file": "steps/s01.yaml",
                    "inputs": {"sections_file": "raw/sections.json"},
                },
            ],
        }
        path = tmp_path / "pipeline.yaml"
        path.write_text(yaml.safe_dump(config))
        cfg = load_pipeline_config(path)
        assert cfg.project_name == "duct"
        assert cfg.data_root == tmp_path / "data"
        assert cfg.steps[0].inputs["sections_file"] == "raw/sections.json"

    def test_step_config_round_trip(self, tmp_path: Path):
        path = tmp_path / "steps" / "s02.yaml"
        save_step_config(MorphInterpolationConfig(iterations=5, apply_spline=True), path)
        cfg = load_step_config(path, MorphInterpolationConfig)
        assert cfg.iterations == 5
        assert cfg.apply_spline is True

    def test_missing_step_config_uses_defaults(self, tmp_path: Path):
        cfg = load_step_config(tmp_path / "nope.yaml", ContourMatchingConfig)
        assert cfg == ContourMatchingConfig()

    def test_invalid_step_config(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("iterations: -2\n")
        with pytest.raises(ValueError):
            load_step_config(path, MorphInterpolationConfig)

    def test_resolve_config_relative_to_pipeline(self, tmp_path: Path):
        entry = StepEntry(name="s01", module="m", config_file="steps/s01.yaml")
        resolved = resolve_config_file(entry, tmp_path / "pipeline.yaml")
        assert resolved == tmp_path / "steps" / "s01.yaml"


class TestImportStepClass:
    @pytest.mark.parametrize("module,cls_name", [
        ("secmorph.steps.s01_contour_matching", "ContourMatchingStep"),
        ("secmorph.steps.s02_morph_interpolation", "MorphInterpolationStep"),
        ("secmorph.steps.s03_surface_stitching", "SurfaceStitchingStep"),
    ])
    def test_finds_step(self, module, cls_name):
        assert import_step_class(module).__name__ == cls_name

    def test_missing_module(self):
        with pytest.raises(ImportError):
            import_step_class("secmorph.steps.s99_missing")
