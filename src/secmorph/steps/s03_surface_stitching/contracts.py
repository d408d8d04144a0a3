"""I/O contracts for Step 03: Surface stitching."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class SurfaceStitchingInput(BaseModel):
    sections_file: Path = Field(..., description="Section stack to stitch (usually from s02)")


class SurfaceStitchingOutput(BaseModel):
    mesh_file: Path = Field(..., description="Path to mesh.json (welded triangle mesh)")
    num_vertices: int = Field(0, description="Vertices after welding")
    num_faces: int = Field(0, description="Triangles after welding")
    surface_area: float = Field(0.0, description="Total triangle area")
    skipped_ribbons: int = Field(0, description="Matched pairs that could not be stitched")
    is_watertight: Optional[bool] = Field(None, description="trimesh watertightness check")
    euler_number: Optional[int] = Field(None, description="trimesh Euler characteristic")
