"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class SectionStackDocument(BaseModel):
    """A section stack as exchanged between steps (sections.json).

    Keys of ``sections`` are section indices; each value is a list of closed
    polygons given as [[x, y], ...] vertex lists.
    """

    name: str = "Unnamed"
    spacing: float = Field(1.0, gt=0, description="Distance between consecutive section indices")
    origin: float = Field(0.0, description="Distance of section index 0 along the stack normal")
    sections: dict[int, list[list[list[float]]]] = Field(default_factory=dict)

    @field_validator("sections")
    @classmethod
    def _check_points(cls, v: dict[int, list[list[list[float]]]]):
        for idx, polys in v.items():
            for poly in polys:
                for pt in poly:
                    if len(pt) != 2:
                        raise ValueError(f"Section {idx}: vertices must be [x, y] pairs")
        return v


class MeshDocument(BaseModel):
    """Triangle mesh as exchanged between steps (mesh.json)."""

    vertices: list[list[float]] = Field(default_factory=list)
    faces: list[list[int]] = Field(default_factory=list)


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "secmorph_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    inputs: dict[str, Any] = Field(default_factory=dict, description="Literal input fields for this step")
    enabled: bool = True


# Fix forward reference
PipelineConfig.model_rebuild()
