"""Surface stitching: triangulate the band between every pair of matched contours.

For one ContourMatch, the source vertices with a single map ("anchors") split
the band into ribbons. The ribbon between consecutive anchors a0 and a1 is the
source chain a0..a1 followed by the target chain from target(a1) back to
target(a0); it is triangulated as a strip, always taking the shorter diagonal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from secmorph.core.contracts import MeshDocument
from secmorph.core.errors import StitchError
from secmorph.core.section_store import SectionStore
from secmorph.core.tasks import CancellationToken, ProgressCallback, is_cancelled, report
from secmorph.utils.geometry import is_counter_clockwise
from .contour_matcher import ContourMatch
from .contour_path import ContourPath

logger = logging.getLogger(__name__)

# twice-area below this is treated as a degenerate triangle
_MIN_DOUBLE_AREA = 1e-12


@dataclass
class Mesh:
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return self.num_faces == 0

    def triangle_areas(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(0)
        tri = self.vertices[self.faces]
        cross = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        return 0.5 * np.linalg.norm(cross, axis=1)

    @property
    def surface_area(self) -> float:
        return float(self.triangle_areas().sum())

    def weld(self) -> Mesh:
        """Merge vertices at exactly the same position and drop collapsed faces."""
        if self.num_vertices == 0:
            return Mesh()
        unique, inverse = np.unique(self.vertices, axis=0, return_inverse=True)
        inverse = np.asarray(inverse).reshape(-1)
        faces = inverse[self.faces] if self.num_faces else self.faces
        if len(faces):
            keep = (faces[:, 0] != faces[:, 1]) & (faces[:, 1] != faces[:, 2]) & (faces[:, 0] != faces[:, 2])
            faces = faces[keep]
        logger.debug(f"Welded {self.num_vertices} -> {len(unique)} vertices, {len(faces)} faces kept")
        return Mesh(vertices=unique, faces=faces.astype(np.int64))

    def to_trimesh(self):
        import trimesh

        return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)

    def to_document(self) -> MeshDocument:
        return MeshDocument(vertices=self.vertices.tolist(), faces=self.faces.tolist())

    @classmethod
    def from_document(cls, doc: MeshDocument) -> Mesh:
        vertices = np.array(doc.vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.array(doc.faces, dtype=np.int64).reshape(-1, 3)
        return cls(vertices=vertices, faces=faces)


@dataclass
class StitchResult:
    mesh: Mesh = field(default_factory=Mesh)
    cancelled: bool = False
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)


def strip_triangulate(chain_p: np.ndarray, chain_q: np.ndarray) -> list[tuple[int, int, int]]:
    """Triangulate the band between two chains walked in the same direction.

    Indices < len(chain_p) refer to chain_p, the rest to chain_q (offset by
    len(chain_p)). Winding follows the polygon P0..Pn, Qm..Q0. Zero-area
    triangles are skipped.
    """
    p, q = len(chain_p), len(chain_q)
    tris: list[tuple[int, int, int]] = []
    i = j = 0
    while i < p - 1 or j < q - 1:
        if i == p - 1:
            advance_p = False
        elif j == q - 1:
            advance_p = True
        else:
            d_p = np.linalg.norm(chain_p[i + 1] - chain_q[j])
            d_q = np.linalg.norm(chain_p[i] - chain_q[j + 1])
            advance_p = d_p <= d_q

        if advance_p:
            tri = (i, i + 1, p + j)
            pts = (chain_p[i], chain_p[i + 1], chain_q[j])
            i += 1
        else:
            tri = (i, p + j + 1, p + j)
            pts = (chain_p[i], chain_q[j + 1], chain_q[j])
            j += 1

        double_area = np.linalg.norm(np.cross(pts[1] - pts[0], pts[2] - pts[0]))
        if double_area > _MIN_DOUBLE_AREA:
            tris.append(tri)
    return tris


class SurfaceStitcher:
    def __init__(self, store: SectionStore):
        self.store = store

    def _lift(self, match: ContourMatch) -> tuple[np.ndarray, np.ndarray]:
        z_prev = self.store.distance_of(match.prev_section)
        z_next = self.store.distance_of(match.next_section)
        z_a, z_b = (z_next, z_prev) if match.reversed else (z_prev, z_next)
        a3 = np.column_stack([match.source, np.full(match.n_source, z_a)])
        b3 = np.column_stack([match.target, np.full(match.n_target, z_b)])
        return a3, b3

    def stitch_match(self, match: ContourMatch) -> Mesh:
        """Triangle soup for the band between one matched contour pair.

        Raises StitchError if the match has no anchors or yields no triangles.
        """
        n_a, n_b = match.n_source, match.n_target
        anchors = [i for i in range(n_a) if match.target_count_per_a[i] == 1]
        if not anchors:
            raise StitchError(
                f"Sections {match.prev_section}->{match.next_section}: no anchor vertices"
            )
        target_of = {vm.source: vm.target for vm in match.matches}
        dir_b = 1 if is_counter_clockwise(match.source) != is_counter_clockwise(match.target) else -1

        a3, b3 = self._lift(match)
        vertices = np.vstack([a3, b3])
        faces: list[tuple[int, int, int]] = []

        for k, a0 in enumerate(anchors):
            a1 = anchors[(k + 1) % len(anchors)]
            span_a = (a1 - a0) % n_a or n_a
            chain_a = [(a0 + s) % n_a for s in range(span_a + 1)]

            t0, t1 = target_of[a0], target_of[a1]
            if len(anchors) == 1:
                span_b = n_b
            else:
                span_b = ((t0 - t1) * dir_b) % n_b
            # target chain t1 -> t0 stepping dir_b, reversed to run alongside chain_a
            chain_b = [(t1 + dir_b * s) % n_b for s in range(span_b + 1)][::-1]

            local = strip_triangulate(a3[chain_a], b3[chain_b])
            lookup = chain_a + [n_a + v for v in chain_b]
            for tri in local:
                faces.append(tuple(lookup[v] for v in tri))

        if not faces:
            raise StitchError(
                f"Sections {match.prev_section}->{match.next_section}: no non-degenerate triangles"
            )
        face_arr = np.array(faces, dtype=np.int64)
        if match.reversed:
            face_arr = face_arr[:, ::-1].copy()
        return Mesh(vertices=vertices, faces=face_arr)

    def stitch(
        self,
        paths: Iterable[ContourPath],
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> StitchResult:
        result = StitchResult()
        matches: list[ContourMatch] = []
        seen: set[int] = set()
        for path in paths:
            for m in path.matches:
                if id(m) not in seen:
                    seen.add(id(m))
                    matches.append(m)

        all_vertices: list[np.ndarray] = []
        all_faces: list[np.ndarray] = []
        offset = 0
        for done, match in enumerate(matches, 1):
            if is_cancelled(cancel):
                logger.info(f"Stitching cancelled after {done - 1}/{len(matches)} matches")
                result.cancelled = True
                break
            try:
                band = self.stitch_match(match)
            except StitchError as e:
                msg = f"Skipped ribbon: {e}"
                logger.warning(msg)
                result.warnings.append(msg)
                result.skipped += 1
                continue
            all_vertices.append(band.vertices)
            all_faces.append(band.faces + offset)
            offset += band.num_vertices
            report(progress, "stitch", done, len(matches))

        if all_vertices:
            soup = Mesh(vertices=np.vstack(all_vertices), faces=np.vstack(all_faces))
            result.mesh = soup.weld()

        logger.info(
            f"Stitched {len(matches) - result.skipped} bands: {result.mesh.num_vertices} vertices, "
            f"{result.mesh.num_faces} faces, {result.skipped} skipped"
        )
        return result
