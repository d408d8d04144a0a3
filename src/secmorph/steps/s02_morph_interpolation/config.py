"""Configuration for Step 02: Morph interpolation."""

import math

from pydantic import BaseModel, Field


class MorphInterpolationConfig(BaseModel):
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
    shape_name: str = Field("Unnamed", description="Name given to the morphed section set")
