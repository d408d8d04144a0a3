"""Tests for the typer CLI."""

from pathlib import Path

import yaml
from typer.testing import CliRunner

from secmorph.cli import app
from secmorph.utils.io import load_mesh_document, load_section_stack

runner = CliRunner()


def _write_pipeline(tmp_path: Path) -> Path:
    config = {
        "project_name": "cli_project",
        "data_root": str(tmp_path / "data"),
        "steps": [
            {
                "name": "s01_contour_matching",
                "module": "secmorph.steps.s01_contour_matching",
                "config_file": "steps/s01.yaml",
            },
            {
                "name": "s02_morph_interpolation",
                "module": "secmorph.steps.s02_morph_interpolation",
                "config_file": "steps/s02.yaml",
                "depends_on": ["s01_contour_matching"],
                "enabled": False,
            },
        ],
    }
    path = tmp_path / "pipeline.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


class TestInfo:
    def test_lists_steps(self, tmp_path: Path):
        result = runner.invoke(app, ["info", "--config", str(_write_pipeline(tmp_path))])
        assert result.exit_code == 0
        assert "cli_project" in result.output


class TestRunStep:
    def test_unknown_step(self, tmp_path: Path):
        result = runner.invoke(app, ["run-step", "s09_nothing", "--config", str(_write_pipeline(tmp_path))])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_missing_required_input(self, tmp_path: Path):
        result = runner.invoke(
            app, ["run-step", "s01_contour_matching", "--config", str(_write_pipeline(tmp_path))]
        )
        assert result.exit_code == 1
        assert "sections_file" in result.output


class TestMorph:
    def test_writes_sections(self, tmp_path: Path, sample_sections_json: Path):
        out_dir = tmp_path / "out"
        result = runner.invoke(app, ["morph", str(sample_sections_json), "-o", str(out_dir), "-n", "1"])
        assert result.exit_code == 0, result.output

        morphed = load_section_stack(out_dir / "sections.json")
        assert len(morphed) == 7
        assert not (out_dir / "mesh.json").exists()

    def test_writes_surface(self, tmp_path: Path, sample_sections_json: Path):
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["morph", str(sample_sections_json), "-o", str(out_dir), "--spline", "--surface"]
        )
        assert result.exit_code == 0, result.output
        doc = load_mesh_document(out_dir / "mesh.json")
        assert len(doc.faces) > 0

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["morph", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
