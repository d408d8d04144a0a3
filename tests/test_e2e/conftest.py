"""Fixtures for E2E pipeline tests."""

from __future__ import annotations

import json
import math
from pathlib import Path

import numpy as np
import pytest
import yaml


def create_tapered_stack(
    output_dir: Path,
    num_sections: int = 6,
    spacing: float = 1.0,
) -> Path:
    """
    Write a sections.json that morphs from a square into an octagon.

    Every other section is left empty so the pipeline has gaps to bridge.

    Args:
        output_dir: Directory to save the stack
        num_sections: Number of section slots (populated and empty)
        spacing: Distance between consecutive section slots

    Returns:
        Path to the created sections.json
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    sections = {}
    for i in range(0, num_sections, 2):
        n = 4 if i < num_sections // 2 else 8
        radius = 1.0 + 0.2 * i
        t = math.pi / 4 + 2 * math.pi * np.arange(n) / n
        poly = np.column_stack([radius * np.cos(t), radius * np.sin(t)])
        sections[str(i)] = [poly.tolist()]

    sections_file = output_dir / "sections.json"
    with open(sections_file, "w") as f:
        json.dump({"name": "taper", "spacing": spacing, "origin": 0.0, "sections": sections}, f)
    return sections_file


@pytest.fixture
def tapered_stack(tmp_path: Path) -> Path:
    return create_tapered_stack(tmp_path / "pipeline_data" / "raw")


@pytest.fixture
def pipeline_yaml(tmp_path: Path, tapered_stack: Path) -> Path:
    """pipeline.yaml plus step configs, all with absolute paths under tmp_path."""
    config_dir = tmp_path / "configs"
    steps_dir = config_dir / "steps"
    steps_dir.mkdir(parents=True, exist_ok=True)

    step_configs = {
        "s01_contour_matching": {"weight_threshold": 0.8},
        "s02_morph_interpolation": {"iterations": 2, "apply_spline": True, "shape_name": "taper"},
        "s03_surface_stitching": {"compute_stats": True},
    }
    for name, cfg in step_configs.items():
        with open(steps_dir / f"{name}.yaml", "w") as f:
            yaml.safe_dump(cfg, f)

    pipeline = {
        "project_name": "taper_e2e",
        "data_root": str(tmp_path / "pipeline_data"),
        "steps": [
            {
                "name": "s01_contour_matching",
                "module": "secmorph.steps.s01_contour_matching",
                "config_file": "steps/s01_contour_matching.yaml",
                "inputs": {"sections_file": str(tapered_stack)},
            },
            {
                "name": "s02_morph_interpolation",
                "module": "secmorph.steps.s02_morph_interpolation",
                "config_file": "steps/s02_morph_interpolation.yaml",
                "depends_on": ["s01_contour_matching"],
            },
            {
                "name": "s03_surface_stitching",
                "module": "secmorph.steps.s03_surface_stitching",
                "config_file": "steps/s03_surface_stitching.yaml",
                "depends_on": ["s02_morph_interpolation"],
            },
        ],
    }
    pipeline_path = config_dir / "pipeline.yaml"
    with open(pipeline_path, "w") as f:
        yaml.safe_dump(pipeline, f, sort_keys=False)
    return pipeline_path
