"""Vertex correspondence between two contours on neighbouring sections.

Both contours are reduced to radial profiles and every vertex pair is weighted
by angular similarity, ``w = 1 - angle_diff / pi``. The contour with more
vertices is always the internal source (A) so that every A vertex gets exactly
one primary map and surplus A vertices can later be decimated away:

1. for each B vertex, the best A vertex above the threshold is (re)pointed at it;
   an A vertex that is already mapped moves only for a strictly better weight
2. every A vertex still unmapped takes its best B vertex, threshold ignored
3. every B vertex still without a source gets an extra map from its best A vertex
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal

import numpy as np

from secmorph.core.errors import DecimationExhaustedError
from secmorph.utils.geometry import angle_diff_matrix, node_angles, segment_lengths
from .radial_profile import RadialProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VertexMatch:
    """Source vertex -> target vertex with its similarity weight in [0, 1]."""

    source: int
    target: int
    weight: float


class ContourMatch:
    """Mapping from source polygon A onto target polygon B.

    ``reversed`` is True when A/B were swapped relative to the caller's order
    (the caller's first polygon had fewer vertices). ``prev_section`` and
    ``next_section`` always follow the caller's (section) order.
    """

    def __init__(
        self,
        source: np.ndarray,
        target: np.ndarray,
        *,
        reversed: bool,
        prev_section: int,
        next_section: int,
        weights: np.ndarray,
        matches: list[VertexMatch],
        extra_matches: list[VertexMatch],
        source_count_per_b: np.ndarray,
        target_count_per_a: np.ndarray,
    ):
        self.source = source
        self.target = target
        self.reversed = reversed
        self.prev_section = prev_section
        self.next_section = next_section
        self.weights = weights
        self.matches = matches
        self.extra_matches = extra_matches
        self.source_count_per_b = source_count_per_b
        self.target_count_per_a = target_count_per_a

    def __repr__(self) -> str:
        return (
            f"ContourMatch(sections={self.prev_section}->{self.next_section}, "
            f"nA={self.n_source}, nB={self.n_target}, reversed={self.reversed})"
        )

    @property
    def n_source(self) -> int:
        return len(self.source)

    @property
    def n_target(self) -> int:
        return len(self.target)

    @property
    def section_gap(self) -> int:
        return self.next_section - self.prev_section

    @property
    def ordered_source(self) -> np.ndarray:
        """Polygon on ``prev_section``."""
        return self.target if self.reversed else self.source

    @property
    def ordered_target(self) -> np.ndarray:
        """Polygon on ``next_section``."""
        return self.source if self.reversed else self.target

    def copy(self) -> ContourMatch:
        return ContourMatch(
            self.source.copy(),
            self.target.copy(),
            reversed=self.reversed,
            prev_section=self.prev_section,
            next_section=self.next_section,
            weights=self.weights.copy(),
            matches=list(self.matches),
            extra_matches=list(self.extra_matches),
            source_count_per_b=self.source_count_per_b.copy(),
            target_count_per_a=self.target_count_per_a.copy(),
        )

    def remove_redundant_vertex(self, min_angle: float, min_length_fraction: float = 0.1) -> int:
        """Remove one source vertex, preferring one that shares an over-subscribed target.

        Candidates are A vertices primarily mapped to the first B vertex with the
        highest fan-in, with a node angle above ``min_angle`` and a longer
        adjoining edge above ``min_length_fraction`` of the mean edge length; the
        one with the shortest adjoining edge goes. Without a candidate, the
        vertex with the globally shortest adjoining edge among those above
        ``min_angle`` goes, and if no vertex clears the angle, the globally
        shortest regardless of angle.

        Returns the removed source index.
        """
        n = self.n_source
        if n <= 3:
            raise DecimationExhaustedError(f"Source contour has {n} vertices; cannot remove more")

        angles = node_angles(self.source)
        lengths = segment_lengths(self.source)
        # edge into vertex i is lengths[i - 1], edge out of it is lengths[i]
        shortest = np.minimum(lengths, np.roll(lengths, 1))
        longest = np.maximum(lengths, np.roll(lengths, 1))
        min_length = min_length_fraction * float(lengths.mean())

        target_node = int(np.argmax(self.source_count_per_b))
        candidates = [
            m.source for m in self.matches
            if m.target == target_node
            and angles[m.source] > min_angle
            and longest[m.source] > min_length
        ]

        if candidates:
            removed = min(candidates, key=lambda i: (shortest[i], i))
        else:
            eligible = np.flatnonzero(angles > min_angle)
            if len(eligible) == 0:
                eligible = np.arange(n)
            removed = int(eligible[np.argmin(shortest[eligible])])
            logger.debug(
                f"No removable source on target {target_node}; "
                f"falling back to shortest-edge vertex {removed}"
            )

        self._remove_source(removed)
        return removed

    def _remove_source(self, k: int) -> None:
        self.source_count_per_b[self.matches[k].target] -= 1

        extras = []
        for e in self.extra_matches:
            if e.source == k:
                self.source_count_per_b[e.target] -= 1
            elif e.source > k:
                extras.append(replace(e, source=e.source - 1))
            else:
                extras.append(e)
        self.extra_matches = extras

        kept = [m for m in self.matches if m.source != k]
        self.matches = [replace(m, source=i) for i, m in enumerate(kept)]
        self.source = np.delete(self.source, k, axis=0)
        self.weights = np.delete(self.weights, k, axis=0)
        self.target_count_per_a = np.delete(self.target_count_per_a, k)

    def to_dict(self) -> dict:
        """JSON-serializable form; ``from_dict`` restores an equivalent match."""
        return {
            "prev_section": self.prev_section,
            "next_section": self.next_section,
            "reversed": self.reversed,
            "source": self.source.tolist(),
            "target": self.target.tolist(),
            "weights": self.weights.tolist(),
            "matches": [[m.source, m.target, m.weight] for m in self.matches],
            "extra_matches": [[m.source, m.target, m.weight] for m in self.extra_matches],
            "source_count_per_b": self.source_count_per_b.tolist(),
            "target_count_per_a": self.target_count_per_a.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ContourMatch:
        source = np.array(data["source"], dtype=np.float64).reshape(-1, 2)
        target = np.array(data["target"], dtype=np.float64).reshape(-1, 2)
        return cls(
            source,
            target,
            reversed=bool(data["reversed"]),
            prev_section=int(data["prev_section"]),
            next_section=int(data["next_section"]),
            weights=np.array(data["weights"], dtype=np.float64).reshape(len(source), len(target)),
            matches=[VertexMatch(int(s), int(t), float(w)) for s, t, w in data["matches"]],
            extra_matches=[VertexMatch(int(s), int(t), float(w)) for s, t, w in data["extra_matches"]],
            source_count_per_b=np.array(data["source_count_per_b"], dtype=np.int64),
            target_count_per_a=np.array(data["target_count_per_a"], dtype=np.int64),
        )


class ContourMatcher:
    """Builds ContourMatch objects between pairs of polygons."""

    def __init__(self, threshold: float = 0.8, centroid_mode: Literal["vertex", "area"] = "vertex"):
        self.threshold = threshold
        self.centroid_mode = centroid_mode

    def match(
        self,
        polygon_a: np.ndarray,
        polygon_b: np.ndarray,
        prev_section: int = 0,
        next_section: int = 1,
    ) -> ContourMatch:
        """Map the vertices of ``polygon_a`` (on prev_section) onto ``polygon_b``.

        Raises DegenerateGeometryError if either polygon cannot be profiled.
        """
        a = np.asarray(polygon_a, dtype=np.float64).copy()
        b = np.asarray(polygon_b, dtype=np.float64).copy()
        is_reversed = len(a) < len(b)
        if is_reversed:
            a, b = b, a

        profile_a = RadialProfile.build(a, self.centroid_mode)
        profile_b = RadialProfile.build(b, self.centroid_mode)
        weights = 1.0 - angle_diff_matrix(profile_a.angles, profile_b.angles) / np.pi

        n_a, n_b = len(a), len(b)
        primary: list[VertexMatch | None] = [None] * n_a
        held_weight = np.full(n_a, -np.inf)
        source_counts = np.zeros(n_b, dtype=np.int64)
        target_counts = np.zeros(n_a, dtype=np.int64)

        # Phase 1: give every B vertex a chance at a source above threshold
        for j in range(n_b):
            col = weights[:, j]
            eligible = (col > self.threshold) & (col > held_weight)
            if not eligible.any():
                continue
            i = int(np.argmax(np.where(eligible, col, -np.inf)))
            held = primary[i]
            if held is not None:
                source_counts[held.target] -= 1
                target_counts[i] -= 1
            primary[i] = VertexMatch(i, j, float(col[i]))
            held_weight[i] = col[i]
            source_counts[j] += 1
            target_counts[i] += 1

        # Phase 2: unmapped A vertices take their best B vertex
        for i in range(n_a):
            if primary[i] is None:
                j = int(np.argmax(weights[i]))
                primary[i] = VertexMatch(i, j, float(weights[i, j]))
                source_counts[j] += 1
                target_counts[i] += 1

        # Phase 3: orphaned B vertices are recorded as extra maps
        extras: list[VertexMatch] = []
        for j in np.flatnonzero(source_counts == 0):
            j = int(j)
            i = int(np.argmax(weights[:, j]))
            extras.append(VertexMatch(i, j, float(weights[i, j])))
            source_counts[j] += 1
            target_counts[i] += 1

        logger.debug(
            f"Matched sections {prev_section}->{next_section}: nA={n_a}, nB={n_b}, "
            f"extras={len(extras)}, reversed={is_reversed}"
        )

        return ContourMatch(
            a,
            b,
            reversed=is_reversed,
            prev_section=prev_section,
            next_section=next_section,
            weights=weights,
            matches=primary,
            extra_matches=extras,
            source_count_per_b=source_counts,
            target_count_per_a=target_counts,
        )


def match_contours(
    polygon_a: np.ndarray,
    polygon_b: np.ndarray,
    threshold: float = 0.8,
    prev_section: int = 0,
    next_section: int = 1,
    centroid_mode: Literal["vertex", "area"] = "vertex",
) -> ContourMatch:
    """Shorthand for ``ContourMatcher(threshold, centroid_mode).match(...)``."""
    return ContourMatcher(threshold, centroid_mode).match(polygon_a, polygon_b, prev_section, next_section)
