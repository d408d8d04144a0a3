"""Configuration for Step 03: Surface stitching."""

from typing import Literal

from pydantic import BaseModel, Field


class SurfaceStitchingConfig(BaseModel):
    # Matching of the (morphed) stack the surface is built from
    weight_threshold: float = Field(
        0.8, ge=0.0, le=1.0, description="Min vertex-pair weight for the first matching pass"
    )
    allow_multi_contour: bool = Field(
        False, description="Stitch every contour in a section (else only the first)"
    )
    centroid_mode: Literal["vertex", "area"] = Field(
        "vertex", description="Radial profile centre: vertex average or area-weighted centroid"
    )

    # Mesh checks
    compute_stats: bool = Field(True, description="Report watertightness and volume via trimesh")
