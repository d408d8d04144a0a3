"""Configuration for the morph engine."""

import math
from typing import Literal

from pydantic import BaseModel, Field


class MorphConfig(BaseModel):
    # Matching
    weight_threshold: float = Field(
        0.8, ge=0.0, le=1.0, description="Min vertex-pair weight for the first matching pass"
    )
    allow_multi_contour: bool = Field(
        False, description="Match every contour in a section (else only the first)"
    )
    centroid_mode: Literal["vertex", "area"] = Field(
        "vertex", description="Radial profile centre: vertex average or area-weighted centroid"
    )

    # Interpolation
    iterations: int = Field(1, ge=0, description="Intermediate contours per section gap")
    apply_spline: bool = Field(False, description="Cubic spline paths instead of linear")
    end_spline_factor: float = Field(1.0, description="Tangent scale at the ends of a path")
    angle_threshold: float = Field(
        3 * math.pi / 4, ge=0.0, le=math.pi,
        description="Min node angle (radians) for a vertex to be decimated",
    )
    length_threshold: float = Field(
        0.1, ge=0.0, description="Min adjoining edge length, as a fraction of the mean edge"
    )

    # Surface
    generate_surface: bool = Field(False, description="Stitch the morphed stack into a mesh")

    # Output
    shape_name: str = Field("Unnamed", description="Name given to the morphed section set")
