"""I/O contracts for Step 02: Morph interpolation."""

from pathlib import Path

from pydantic import BaseModel, Field


class MorphInterpolationInput(BaseModel):
    sections_file: Path = Field(..., description="Original section stack (spacing and origin)")
    matches_file: Path = Field(..., description="Path to matches.json from s01")


class MorphInterpolationOutput(BaseModel):
    sections_file: Path = Field(..., description="Morphed section stack, intermediates included")
    num_sections: int = Field(0, description="Populated sections in the morphed stack")
    num_contours: int = Field(0, description="Contours in the morphed stack")
    sub_spacing: float = Field(1.0, description="Distance between consecutive morphed sections")
    warnings: list[str] = Field(default_factory=list, description="Clamped decimations")
