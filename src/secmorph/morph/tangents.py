"""Per-vertex travel directions along a morph path, used for spline interpolation.

Lateral displacement is measured against depth in two decoupled planes: the
x-depth plane and the y-depth plane. For one vertex map the angles are

    theta_x = atan2(dx, d_depth)
    theta_y = atan2(dy, d_depth)

with d_depth = (next_section - prev_section) * spacing. A contour in the middle
of a path gets the bisector of its incoming and outgoing angles; the first and
last contours get their single neighbour's angle scaled by ``end_spline_factor``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from secmorph.utils.geometry import blended_angle
from .contour_matcher import ContourMatch
from .contour_path import ContourPath

logger = logging.getLogger(__name__)


@dataclass
class MatchTangents:
    """Tangent angles at both ends of one ContourMatch.

    ``start_*`` are indexed by vertices of the match's ordered source (the
    polygon on prev_section), ``end_*`` by vertices of its ordered target.
    """

    start_x: np.ndarray
    start_y: np.ndarray
    end_x: np.ndarray
    end_y: np.ndarray

    def source_angles(self, match: ContourMatch) -> tuple[np.ndarray, np.ndarray]:
        """(theta_x, theta_y) indexed by the match's internal source vertices."""
        if match.reversed:
            return self.end_x, self.end_y
        return self.start_x, self.start_y

    def target_angles(self, match: ContourMatch) -> tuple[np.ndarray, np.ndarray]:
        """(theta_x, theta_y) indexed by the match's internal target vertices."""
        if match.reversed:
            return self.start_x, self.start_y
        return self.end_x, self.end_y


def _circular_mean(angles: list[float]) -> float:
    if not angles:
        return 0.0
    a = np.asarray(angles)
    return float(np.arctan2(np.sin(a).mean(), np.cos(a).mean()))


class TangentEstimator:
    def __init__(self, spacing: float = 1.0, end_spline_factor: float = 1.0):
        self.spacing = spacing
        self.end_spline_factor = end_spline_factor

    def _map_angles(self, match: ContourMatch):
        """Outgoing angles per ordered-source vertex and incoming per ordered-target vertex."""
        depth = match.section_gap * self.spacing
        n_prev = len(match.ordered_source)
        n_next = len(match.ordered_target)
        out_x: list[list[float]] = [[] for _ in range(n_prev)]
        out_y: list[list[float]] = [[] for _ in range(n_prev)]
        in_x: list[list[float]] = [[] for _ in range(n_next)]
        in_y: list[list[float]] = [[] for _ in range(n_next)]

        for vm in list(match.matches) + list(match.extra_matches):
            if match.reversed:
                v_prev, v_next = vm.target, vm.source
            else:
                v_prev, v_next = vm.source, vm.target
            dx, dy = match.ordered_target[v_next] - match.ordered_source[v_prev]
            tx = float(np.arctan2(dx, depth))
            ty = float(np.arctan2(dy, depth))
            out_x[v_prev].append(tx)
            out_y[v_prev].append(ty)
            in_x[v_next].append(tx)
            in_y[v_next].append(ty)

        outgoing = (
            np.array([_circular_mean(a) for a in out_x]),
            np.array([_circular_mean(a) for a in out_y]),
        )
        incoming = (
            np.array([_circular_mean(a) for a in in_x]),
            np.array([_circular_mean(a) for a in in_y]),
        )
        return outgoing, incoming

    def _junction(self, incoming: np.ndarray, outgoing: np.ndarray) -> np.ndarray:
        if len(incoming) != len(outgoing):
            # contours on either side of a junction should be the same polygon
            logger.warning(
                f"Junction vertex count mismatch ({len(incoming)} vs {len(outgoing)}); "
                f"using incoming angles"
            )
            return incoming.copy()
        return np.array([blended_angle(a, b) for a, b in zip(incoming, outgoing)])

    def estimate(self, path: ContourPath) -> list[MatchTangents]:
        """One MatchTangents per match of ``path``, in path order."""
        if not path.matches:
            return []
        per_match = [self._map_angles(m) for m in path.matches]
        f = self.end_spline_factor
        last = len(per_match) - 1
        result = []
        for k, (outgoing, incoming) in enumerate(per_match):
            if k == 0:
                start = (outgoing[0] * f, outgoing[1] * f)
            else:
                prev_in = per_match[k - 1][1]
                start = (self._junction(prev_in[0], outgoing[0]), self._junction(prev_in[1], outgoing[1]))
            if k == last:
                end = (incoming[0] * f, incoming[1] * f)
            else:
                next_out = per_match[k + 1][0]
                end = (self._junction(incoming[0], next_out[0]), self._junction(incoming[1], next_out[1]))
            result.append(MatchTangents(start[0], start[1], end[0], end[1]))
        logger.debug(f"Estimated tangents for path {path.path_id}: {len(result)} matches")
        return result
