"""Radial profile: a closed polygon forced onto a circle.

The rightmost vertex (max X, always on the convex hull) is the anchor and keeps
its true angle around the centroid. Every other vertex is placed by arc length:

    alpha_i = anchor_angle + sign * (l_i / L) * 2 pi

where l_i is the perimetric length from the anchor to vertex i in polygon order,
L is the perimeter, and sign is +1 for counter-clockwise polygons, -1 otherwise.
Angles are therefore monotonic in winding order, and two contours can be
compared vertex-by-vertex regardless of their vertex counts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal

import numpy as np

from secmorph.core.errors import DegenerateGeometryError
from secmorph.utils.geometry import (
    TWO_PI,
    area_centroid,
    is_counter_clockwise,
    normalize_angle,
    segment_lengths,
    vertex_centroid,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RadialProfile:
    """Angle/radius parameterization of one polygon.

    ``angles[v]`` and ``radii[v]`` are indexed by polygon vertex, not by radial
    position; use ``node_index`` to walk the profile from the anchor.
    """

    polygon: np.ndarray
    centroid: np.ndarray
    anchor_index: int
    angles: np.ndarray
    radii: np.ndarray
    perimeter: float
    sign: int

    @property
    def size(self) -> int:
        return len(self.polygon)

    @property
    def anchor_angle(self) -> float:
        return float(self.angles[self.anchor_index])

    @property
    def max_radius(self) -> float:
        return float(self.radii.max())

    def node_index(self, i: int) -> int:
        """Polygon vertex index of the i-th radial position (0 is the anchor)."""
        return (self.anchor_index + i) % self.size

    @classmethod
    def build(
        cls,
        polygon: np.ndarray,
        centroid_mode: Literal["vertex", "area"] = "vertex",
    ) -> RadialProfile:
        vertices = np.asarray(polygon, dtype=np.float64)
        n = len(vertices)
        if n < 3:
            raise DegenerateGeometryError(f"Polygon has {n} vertices (need >= 3)")
        if not np.all(np.isfinite(vertices)):
            raise DegenerateGeometryError("Polygon has non-finite coordinates")

        centroid = area_centroid(vertices) if centroid_mode == "area" else vertex_centroid(vertices)

        # first vertex with maximal x
        anchor = int(np.argmax(vertices[:, 0]))

        # edge lengths walked from the anchor: edge k joins radial k -> k+1
        lengths = np.roll(segment_lengths(vertices), -anchor)
        perimeter = float(lengths.sum())
        if perimeter <= 0.0 or not math.isfinite(perimeter):
            raise DegenerateGeometryError("Polygon has zero perimeter")

        offset = vertices[anchor] - centroid
        if float(np.hypot(*offset)) == 0.0:
            raise DegenerateGeometryError("Anchor vertex coincides with the centroid")
        start_angle = math.atan2(offset[1], offset[0])

        sign = 1 if is_counter_clockwise(vertices) else -1

        arc = np.concatenate([[0.0], np.cumsum(lengths[:-1])])
        radial_angles = start_angle + sign * (arc / perimeter) * TWO_PI

        angles = np.empty(n, dtype=np.float64)
        order = (anchor + np.arange(n)) % n
        angles[order] = [normalize_angle(a) for a in radial_angles]
        # anchor keeps its exact geometric angle
        angles[anchor] = start_angle

        radii = np.linalg.norm(vertices - centroid, axis=1)

        return cls(
            polygon=vertices,
            centroid=centroid,
            anchor_index=anchor,
            angles=angles,
            radii=radii,
            perimeter=perimeter,
            sign=sign,
        )
