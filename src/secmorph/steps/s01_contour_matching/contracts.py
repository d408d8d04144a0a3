"""I/O contracts for Step 01: Contour matching."""

from pathlib import Path

from pydantic import BaseModel, Field


class ContourMatchingInput(BaseModel):
    sections_file: Path = Field(..., description="Path to sections.json (section stack)")


class ContourMatchingOutput(BaseModel):
    sections_file: Path = Field(..., description="Section stack the matches were built from")
    matches_file: Path = Field(..., description="Path to matches.json (paths + vertex matches)")
    num_paths: int = Field(0, description="Number of morph paths (branches included)")
    num_matches: int = Field(0, description="Number of contour matches across all paths")
    skipped_contours: int = Field(0, description="Degenerate contours left out of matching")
