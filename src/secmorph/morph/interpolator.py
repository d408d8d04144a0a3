"""Intermediate contour synthesis between matched sections.

Each ContourMatch is interpolated over T = (iterations + 1) * section_gap steps.
The internal source contour (the one with more vertices) walks towards its
target while losing |nA - nB| / T vertices per step, with the fractional part
carried forward so the count drifts smoothly. Output contours are keyed by
``(base_section, sub_index)``, where sub_index 0 is the original section.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from secmorph.core.contracts import SectionStackDocument
from secmorph.core.errors import DecimationExhaustedError
from secmorph.core.section_store import InMemorySectionStore
from secmorph.core.tasks import CancellationToken, ProgressCallback, is_cancelled, report
from secmorph.utils.geometry import cubic_bezier_point
from .contour_matcher import ContourMatch
from .contour_path import ContourPath
from .tangents import MatchTangents, TangentEstimator

logger = logging.getLogger(__name__)

# absorbs float drift when accumulated rates land on an integer
_RESIDUAL_EPS = 1e-9

SectionKey = tuple[int, int]


@dataclass
class MorphSeries:
    """Interpolated contours keyed by (base section, sub index)."""

    spacing: float = 1.0
    iterations: int = 1
    origin: float = 0.0
    name: str = "Unnamed"
    contours: dict[SectionKey, list[np.ndarray]] = field(default_factory=dict)
    cancelled: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def sub_spacing(self) -> float:
        return self.spacing / (self.iterations + 1)

    def flat_index(self, base: int, sub: int) -> int:
        return base * (self.iterations + 1) + sub

    def distance_of(self, base: int, sub: int) -> float:
        return self.origin + base * self.spacing + sub * self.sub_spacing

    def add(self, key: SectionKey, polygon: np.ndarray) -> None:
        """Store a snapshot; an exact duplicate on an original section is ignored."""
        polys = self.contours.setdefault(key, [])
        if key[1] == 0 and any(np.array_equal(p, polygon) for p in polys):
            return
        polys.append(np.array(polygon, dtype=np.float64, copy=True))

    def keys(self) -> list[SectionKey]:
        return sorted(self.contours)

    def __getitem__(self, key: SectionKey) -> list[np.ndarray]:
        return self.contours[key]

    def __contains__(self, key: SectionKey) -> bool:
        return key in self.contours

    def __len__(self) -> int:
        return len(self.contours)

    @property
    def contour_count(self) -> int:
        return sum(len(v) for v in self.contours.values())

    def to_section_store(self) -> InMemorySectionStore:
        """Flatten to a store whose section i sits at ``origin + i * sub_spacing``."""
        store = InMemorySectionStore(spacing=self.sub_spacing, origin=self.origin, name=self.name)
        for (base, sub), polys in sorted(self.contours.items()):
            for poly in polys:
                store.add_contour(self.flat_index(base, sub), poly)
        return store

    def to_document(self) -> SectionStackDocument:
        return self.to_section_store().to_document()


class MorphInterpolator:
    def __init__(
        self,
        iterations: int = 1,
        apply_spline: bool = False,
        angle_threshold: float = 3 * math.pi / 4,
        length_threshold: float = 0.1,
        spacing: float = 1.0,
        end_spline_factor: float = 1.0,
        origin: float = 0.0,
        name: str = "Unnamed",
    ):
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        self.iterations = iterations
        self.apply_spline = apply_spline
        self.angle_threshold = angle_threshold
        self.length_threshold = length_threshold
        self.spacing = spacing
        self.end_spline_factor = end_spline_factor
        self.origin = origin
        self.name = name

    def new_series(self) -> MorphSeries:
        return MorphSeries(
            spacing=self.spacing, iterations=self.iterations, origin=self.origin, name=self.name,
        )

    def interpolate(
        self,
        path: ContourPath,
        tangents: Optional[list[MatchTangents]] = None,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
        series: Optional[MorphSeries] = None,
    ) -> MorphSeries:
        """Interpolate every match of ``path`` into ``series`` (a new one by default)."""
        if series is None:
            series = self.new_series()
        if not path.matches:
            series.add((path.start_section, 0), path.start_polygon)
            return series
        if self.apply_spline and tangents is None:
            tangents = TangentEstimator(self.spacing, self.end_spline_factor).estimate(path)

        last = len(path.matches) - 1
        for k, match in enumerate(path.matches):
            if is_cancelled(cancel):
                series.cancelled = True
                break
            match_tangents = tangents[k] if tangents else None
            self._interpolate_match(match, match_tangents, k == last, series, cancel)
            report(progress, "interpolate", k + 1, len(path.matches))
            if series.cancelled:
                break
        return series

    def interpolate_paths(
        self,
        paths: Iterable[ContourPath],
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> MorphSeries:
        """Interpolate many paths into one series.

        Branches share their history with the parent path; each shared match is
        interpolated once.
        """
        paths = list(paths)
        series = self.new_series()
        estimator = TangentEstimator(self.spacing, self.end_spline_factor)
        seen: set[int] = set()
        total = sum(len(p) for p in paths)
        done = 0

        for path in paths:
            if is_cancelled(cancel):
                series.cancelled = True
                break
            if not path.matches:
                series.add((path.start_section, 0), path.start_polygon)
                continue
            tangents = estimator.estimate(path) if self.apply_spline else None
            last = len(path.matches) - 1
            for k, match in enumerate(path.matches):
                if id(match) in seen:
                    continue
                seen.add(id(match))
                if is_cancelled(cancel):
                    series.cancelled = True
                    break
                self._interpolate_match(match, tangents[k] if tangents else None, k == last, series, cancel)
                done += 1
                report(progress, "interpolate", done, total)
                if series.cancelled:
                    break
            if series.cancelled:
                break

        logger.info(
            f"Interpolated {done} matches into {len(series)} sections "
            f"({series.contour_count} contours, iterations={self.iterations})"
        )
        return series

    def _spline_controls(self, match: ContourMatch, tangents: MatchTangents):
        """(n1, c1, n2, c2) per internal source vertex, in ``cubic_bezier_point`` order."""
        targets = np.array([vm.target for vm in match.matches], dtype=np.int64)
        n1 = match.source.copy()
        n2 = match.target[targets]
        src_x, src_y = tangents.source_angles(match)
        tgt_x, tgt_y = tangents.target_angles(match)
        # depth runs backwards when the internal source sits on next_section
        depth = match.section_gap * self.spacing * (-1.0 if match.reversed else 1.0)
        slope1 = np.column_stack([np.tan(src_x), np.tan(src_y)])
        slope2 = np.column_stack([np.tan(tgt_x[targets]), np.tan(tgt_y[targets])])
        c1 = n1 + slope1 * depth / 3.0
        c2 = n2 - slope2 * depth / 3.0
        return n1, c1, n2, c2

    def _interpolate_match(
        self,
        match: ContourMatch,
        tangents: Optional[MatchTangents],
        is_last: bool,
        series: MorphSeries,
        cancel: Optional[CancellationToken],
    ) -> None:
        per_gap = self.iterations + 1
        series.add((match.prev_section, 0), match.ordered_source)

        work = match.copy()
        total_steps = per_gap * work.section_gap
        rate = abs(work.n_source - work.n_target) / total_steps
        residual = 0.0
        exhausted = False

        controls = None
        if self.apply_spline and tangents is not None:
            controls = list(self._spline_controls(work, tangents))

        for j in range(1, total_steps):
            if is_cancelled(cancel):
                series.cancelled = True
                return

            residual += rate
            remove = int(math.floor(residual + _RESIDUAL_EPS))
            residual -= remove

            if not exhausted:
                for _ in range(remove):
                    if work.n_source <= work.n_target:
                        break
                    try:
                        k = work.remove_redundant_vertex(self.angle_threshold, self.length_threshold)
                    except DecimationExhaustedError as e:
                        exhausted = True
                        msg = (
                            f"Sections {match.prev_section}->{match.next_section}: "
                            f"decimation stopped at step {j}: {e}"
                        )
                        logger.warning(msg)
                        series.warnings.append(msg)
                        break
                    if controls is not None:
                        controls = [np.delete(c, k, axis=0) for c in controls]

            if controls is not None:
                work.source = cubic_bezier_point(*controls, j / total_steps)
            else:
                targets = np.array([vm.target for vm in work.matches], dtype=np.int64)
                work.source = work.source + (work.target[targets] - work.source) / (total_steps - j + 1)

            offset = total_steps - j if work.reversed else j
            key = (match.prev_section + offset // per_gap, offset % per_gap)
            series.add(key, work.source)

        if is_last:
            series.add((match.next_section, 0), match.ordered_target)


def interpolate_paths(
    paths: Iterable[ContourPath],
    iterations: int = 1,
    apply_spline: bool = False,
    spacing: float = 1.0,
    **kwargs,
) -> MorphSeries:
    """Shorthand for ``MorphInterpolator(...).interpolate_paths(paths)``."""
    return MorphInterpolator(iterations, apply_spline, spacing=spacing, **kwargs).interpolate_paths(paths)
