"""Configuration for Step 01: Contour matching."""

from typing import Literal

from pydantic import BaseModel, Field


class ContourMatchingConfig(BaseModel):
    weight_threshold: float = Field(
        0.8, ge=0.0, le=1.0, description="Min vertex-pair weight for the first matching pass"
    )
    allow_multi_contour: bool = Field(
        False, description="Match every contour in a section (else only the first)"
    )
    centroid_mode: Literal["vertex", "area"] = Field(
        "vertex", description="Radial profile centre: vertex average or area-weighted centroid"
    )
