"""Walk a section store and assemble morph paths.

Sections are visited in ascending order. Empty sections are skipped without
breaking a path, so a match may bridge several section indices. When a section
holds several contours they are paired with the previous section's contours by
centroid distance; one previous contour paired with several current contours
bifurcates its path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy.spatial.distance import cdist

from secmorph.core.errors import DegenerateGeometryError, UnmatchableSectionError
from secmorph.core.section_store import SectionStore
from secmorph.core.tasks import CancellationToken, ProgressCallback, is_cancelled, report
from secmorph.utils.geometry import is_degenerate, vertex_centroid
from .contour_matcher import ContourMatcher
from .contour_path import ContourPath

logger = logging.getLogger(__name__)


@dataclass
class WalkResult:
    paths: list[ContourPath] = field(default_factory=list)
    cancelled: bool = False
    skipped_contours: int = 0
    unmatched_contours: int = 0

    @property
    def num_matches(self) -> int:
        return sum(len(p) for p in self.paths)


def match_contours_by_centroid(
    current: list[np.ndarray], previous: list[np.ndarray],
) -> list[tuple[int, int]]:
    """Pair current-section contours with previous-section contours.

    Returns (current_index, previous_index) pairs in priority order:
    mutually closest pairs first, then every unpaired current contour onto its
    nearest previous contour (a branch), then every unpaired previous contour
    onto its nearest current contour (a merge).
    """
    if not current or not previous:
        return []
    cur_c = np.array([vertex_centroid(c) for c in current])
    prev_c = np.array([vertex_centroid(c) for c in previous])
    distances = cdist(cur_c, prev_c)
    nearest_prev = distances.argmin(axis=1)
    nearest_cur = distances.argmin(axis=0)

    pairs: list[tuple[int, int]] = []
    paired_cur: set[int] = set()
    paired_prev: set[int] = set()

    for i, j in enumerate(nearest_prev):
        if nearest_cur[j] == i:
            pairs.append((i, int(j)))
            paired_cur.add(i)
            paired_prev.add(int(j))

    for i, j in enumerate(nearest_prev):
        if i not in paired_cur:
            pairs.append((i, int(j)))
            paired_cur.add(i)
            paired_prev.add(int(j))

    for j, i in enumerate(nearest_cur):
        if j not in paired_prev:
            pairs.append((int(i), j))
            paired_prev.add(j)

    return pairs


class SectionGraphWalker:
    """Builds the list of ContourPaths for a section store."""

    def __init__(self, matcher: ContourMatcher, allow_multi_contour: bool = False):
        self.matcher = matcher
        self.allow_multi_contour = allow_multi_contour

    def run(
        self,
        store: SectionStore,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> WalkResult:
        result = WalkResult()
        try:
            first = store.first_section_index()
            last = store.last_section_index()
        except IndexError:
            logger.info("Section store is empty: no paths")
            return result

        paths = result.paths
        prev_contours: list[np.ndarray] | None = None
        prev_section = first
        # previous contour index -> index of the path that continues from it
        tails: dict[int, int] = {}
        total = last - first + 1

        for done, section in enumerate(range(first, last + 1), 1):
            if is_cancelled(cancel):
                logger.info(f"Matching cancelled at section {section}")
                result.cancelled = True
                break
            report(progress, "match", done, total)

            if not store.has_section(section):
                continue
            contours = self._section_contours(store, section, result)
            if not contours:
                continue

            if prev_contours is None:
                for c in contours:
                    paths.append(ContourPath(c, section, path_id=len(paths)))
                tails = {i: i for i in range(len(contours))}
            else:
                tails = self._advance(paths, tails, prev_contours, prev_section, contours, section, result)

            prev_contours = contours
            prev_section = section

        logger.info(
            f"Walked sections {first}..{last}: {len(paths)} paths, {result.num_matches} matches, "
            f"{result.skipped_contours} skipped contours"
        )
        return result

    def _section_contours(self, store: SectionStore, section: int, result: WalkResult) -> list[np.ndarray]:
        contours = store.contours_at(section)
        if not self.allow_multi_contour:
            contours = contours[:1]
        valid = []
        for k, c in enumerate(contours):
            if is_degenerate(c):
                logger.warning(f"Section {section}: skipping degenerate contour {k} ({len(c)} vertices)")
                result.skipped_contours += 1
                continue
            valid.append(c)
        return valid

    def _advance(
        self,
        paths: list[ContourPath],
        tails: dict[int, int],
        prev_contours: list[np.ndarray],
        prev_section: int,
        contours: list[np.ndarray],
        section: int,
        result: WalkResult,
    ) -> dict[int, int]:
        """Extend/branch paths into ``section`` and return the new tails."""
        snapshot = list(paths)
        extended: set[int] = set()
        new_tails: dict[int, int] = {}

        for i_cur, j_prev in match_contours_by_centroid(contours, prev_contours):
            p_idx = tails.get(j_prev)
            if p_idx is None:
                continue
            try:
                match = self.matcher.match(prev_contours[j_prev], contours[i_cur], prev_section, section)
            except DegenerateGeometryError as e:
                logger.warning(f"Sections {prev_section}->{section}: cannot match contour {j_prev}->{i_cur}: {e}")
                continue

            if p_idx not in extended:
                paths[p_idx] = snapshot[p_idx].extend(match)
                extended.add(p_idx)
                new_idx = p_idx
            else:
                new_idx = len(paths)
                paths.append(snapshot[p_idx].branch(match, path_id=new_idx))
                logger.debug(f"Path {p_idx} bifurcates at section {section} -> path {new_idx}")
            # merges: only the first path reaching a contour continues from it
            new_tails.setdefault(i_cur, new_idx)

        for i_cur, c in enumerate(contours):
            if i_cur in new_tails:
                continue
            err = UnmatchableSectionError(f"Section {section}: contour {i_cur} has no predecessor")
            logger.warning(f"{err}; starting a new path")
            result.unmatched_contours += 1
            new_idx = len(paths)
            paths.append(ContourPath(c, section, path_id=new_idx))
            new_tails[i_cur] = new_idx

        return new_tails
