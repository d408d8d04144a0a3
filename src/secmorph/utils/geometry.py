"""2D polygon and angle utilities shared by the morph modules.

Polygons are (N, 2) float arrays, implicitly closed. Angles are radians.
"""

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def as_polygon(points) -> np.ndarray:
    """Coerce a point sequence to an (N, 2) float64 array (copied)."""
    arr = np.array(points, dtype=np.float64)
    if arr.ndim != 2 or (len(arr) > 0 and arr.shape[1] != 2):
        raise ValueError(f"Expected (N, 2) points, got shape {arr.shape}")
    return arr.reshape(-1, 2)


def normalize_angle(theta: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    wrapped = math.fmod(theta + math.pi, TWO_PI)
    if wrapped <= 0.0:
        wrapped += TWO_PI
    return wrapped - math.pi


def angle_diff(a1: float, a2: float) -> float:
    """Unsigned angular distance between two angles, in [0, pi]."""
    d = abs(normalize_angle(a1 - a2))
    return min(d, math.pi)


def angle_diff_matrix(angles_a: np.ndarray, angles_b: np.ndarray) -> np.ndarray:
    """Pairwise angular distance, shape (len(a), len(b)), in [0, pi]."""
    d = np.abs(angles_a[:, None] - angles_b[None, :]) % TWO_PI
    return np.minimum(d, TWO_PI - d)


def blended_angle(a1: float, a2: float) -> float:
    """Bisector of two direction angles (circular midpoint, shorter arc)."""
    return normalize_angle(a1 + normalize_angle(a2 - a1) / 2.0)


def signed_area(vertices: np.ndarray) -> float:
    """Shoelace area; positive for counter-clockwise vertex order."""
    if len(vertices) < 3:
        return 0.0
    x = vertices[:, 0]
    y = vertices[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def is_counter_clockwise(vertices: np.ndarray) -> bool:
    return signed_area(vertices) > 0


def segment_lengths(vertices: np.ndarray) -> np.ndarray:
    """Length of edge i -> i+1 for every vertex (closing edge included)."""
    return np.linalg.norm(np.roll(vertices, -1, axis=0) - vertices, axis=1)


def node_angles(vertices: np.ndarray) -> np.ndarray:
    """Unsigned angle at each vertex between its two edges, in [0, pi].

    A value close to pi means the vertex is nearly collinear with its neighbours.
    """
    to_prev = np.roll(vertices, 1, axis=0) - vertices
    to_next = np.roll(vertices, -1, axis=0) - vertices
    norms = np.linalg.norm(to_prev, axis=1) * np.linalg.norm(to_next, axis=1)
    dots = np.einsum("ij,ij->i", to_prev, to_next)
    with np.errstate(invalid="ignore", divide="ignore"):
        cos_val = np.where(norms > 0, dots / norms, 1.0)
    return np.arccos(np.clip(cos_val, -1.0, 1.0))


def vertex_centroid(vertices: np.ndarray) -> np.ndarray:
    return vertices.mean(axis=0)


def area_centroid(vertices: np.ndarray) -> np.ndarray:
    """Polygon-area-weighted centroid; falls back to the vertex average for zero area."""
    from shapely.geometry import Polygon

    poly = Polygon(vertices)
    if poly.area <= 0 or poly.is_empty:
        return vertex_centroid(vertices)
    c = poly.centroid
    return np.array([c.x, c.y], dtype=np.float64)


def cubic_bezier_point(
    n1: np.ndarray, c1: np.ndarray, n2: np.ndarray, c2: np.ndarray, t: float,
) -> np.ndarray:
    """Point on the cubic Bezier curve N1 -> N2 with control points C1, C2 at parameter t."""
    s = 1.0 - t
    return (s ** 3) * n1 + 3 * t * (s ** 2) * c1 + 3 * (t ** 2) * s * c2 + (t ** 3) * n2


def is_degenerate(vertices: np.ndarray) -> bool:
    """True if a contour cannot take part in matching or meshing."""
    if vertices is None or len(vertices) < 3:
        return True
    if not np.all(np.isfinite(vertices)):
        return True
    return float(segment_lengths(vertices).sum()) <= 0.0
