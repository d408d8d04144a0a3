"""Shared pytest fixtures for secmorph tests."""

import json
import math
from pathlib import Path

import numpy as np
import pytest


def _regular_polygon(n: int, radius: float = 1.0, center=(0.0, 0.0), phase: float = 0.0) -> np.ndarray:
    """Counter-clockwise regular n-gon."""
    t = phase + 2 * math.pi * np.arange(n) / n
    return np.column_stack([center[0] + radius * np.cos(t), center[1] + radius * np.sin(t)])


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with standard directory structure."""
    for subdir in ["raw", "interim/s01_contour_matching", "interim/s02_morph_interpolation",
                   "interim/s03_surface_stitching"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def square() -> np.ndarray:
    return np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)


@pytest.fixture
def square_with_midpoint() -> np.ndarray:
    """Unit square with an extra vertex halfway up its right edge."""
    return np.array([[0, 0], [1, 0], [1, 0.5], [1, 1], [0, 1]], dtype=float)


@pytest.fixture
def square_with_midpoints() -> np.ndarray:
    """Unit square with a midpoint on every edge (8 vertices)."""
    return np.array([
        [0, 0], [0.5, 0], [1, 0], [1, 0.5],
        [1, 1], [0.5, 1], [0, 1], [0, 0.5],
    ], dtype=float)


@pytest.fixture
def pentagon() -> np.ndarray:
    return _regular_polygon(5, radius=2.0)


@pytest.fixture
def sample_sections_json(data_root: Path, square, square_with_midpoint) -> Path:
    """sections.json with a gap at section 2 and a 4 -> 5 -> 4 vertex count change."""
    doc = {
        "name": "sample",
        "spacing": 0.5,
        "origin": 0.0,
        "sections": {
            "0": [square.tolist()],
            "1": [square_with_midpoint.tolist()],
            "3": [(square * 1.5).tolist()],
        },
    }
    sections_file = data_root / "raw" / "sections.json"
    with open(sections_file, "w") as f:
        json.dump(doc, f)
    return sections_file
