"""Tests for SurfaceStitcher and Mesh."""

import numpy as np
import pytest

from secmorph.core.errors import StitchError
from secmorph.core.section_store import InMemorySectionStore
from secmorph.core.tasks import CancellationToken
from secmorph.morph.contour_matcher import ContourMatcher
from secmorph.morph.section_walker import SectionGraphWalker
from secmorph.morph.stitcher import Mesh, SurfaceStitcher, strip_triangulate


def _stitch(sections: dict, spacing: float = 1.0, **kwargs):
    store = InMemorySectionStore(sections, spacing=spacing)
    paths = SectionGraphWalker(ContourMatcher()).run(store).paths
    return SurfaceStitcher(store).stitch(paths, **kwargs), paths


class TestStripTriangulate:
    def test_quad(self):
        p = np.array([[0, 0, 0], [1, 0, 0]], dtype=float)
        q = np.array([[0, 0, 1], [1, 0, 1]], dtype=float)
        assert strip_triangulate(p, q) == [(0, 1, 2), (1, 3, 2)]

    def test_fan_to_single_point(self):
        p = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]], dtype=float)
        q = np.array([[1, 0, 1]], dtype=float)
        assert len(strip_triangulate(p, q)) == 2

    def test_zero_area_triangles_skipped(self):
        p = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]], dtype=float)
        q = np.array([[3, 0, 0]], dtype=float)
        assert strip_triangulate(p, q) == []


class TestStackedPentagons:
    def test_no_zero_area_triangles(self, pentagon):
        result, _ = _stitch({0: [pentagon], 1: [pentagon], 2: [pentagon]})
        mesh = result.mesh
        assert result.skipped == 0
        assert mesh.num_faces == 20
        assert np.all(mesh.triangle_areas() > 1e-9)

    def test_vertices_welded_to_exact_duplicates(self, pentagon):
        result, _ = _stitch({0: [pentagon], 1: [pentagon], 2: [pentagon]})
        mesh = result.mesh
        # 3 rings of 5 distinct vertices
        assert mesh.num_vertices == 15
        assert len(np.unique(mesh.vertices, axis=0)) == mesh.num_vertices
        assert sorted(set(mesh.vertices[:, 2].tolist())) == [0.0, 1.0, 2.0]

    def test_lateral_area(self, pentagon):
        result, _ = _stitch({0: [pentagon], 1: [pentagon]}, spacing=2.0)
        edges = np.linalg.norm(np.roll(pentagon, -1, axis=0) - pentagon, axis=1)
        assert result.mesh.surface_area == pytest.approx(edges.sum() * 2.0)


class TestSurfaceStitcher:
    @pytest.mark.parametrize("order", ["forward", "reversed"])
    def test_mismatched_counts_cover_walls(self, square, square_with_midpoints, order):
        sections = {0: [square_with_midpoints], 1: [square]}
        if order == "reversed":
            sections = {0: [square], 1: [square_with_midpoints]}
        result, paths = _stitch(sections)
        assert paths[0].matches[0].reversed is (order == "reversed")
        # four unit walls of height 1
        assert result.mesh.surface_area == pytest.approx(4.0)
        assert result.mesh.num_vertices == 12

    def test_section_distances(self, square):
        store = InMemorySectionStore({0: [square], 2: [square]}, spacing=0.5, origin=10.0)
        paths = SectionGraphWalker(ContourMatcher()).run(store).paths
        mesh = SurfaceStitcher(store).stitch(paths).mesh
        assert sorted(set(mesh.vertices[:, 2].tolist())) == [10.0, 11.0]

    def test_match_without_anchors_is_skipped(self, square):
        store = InMemorySectionStore({0: [square], 1: [square], 2: [square]})
        paths = SectionGraphWalker(ContourMatcher()).run(store).paths
        broken = paths[0].matches[0]
        broken.target_count_per_a[:] = 2
        with pytest.raises(StitchError):
            SurfaceStitcher(store).stitch_match(broken)

        result = SurfaceStitcher(store).stitch(paths)
        assert result.skipped == 1
        assert len(result.warnings) == 1
        assert result.mesh.num_faces == 8

    def test_cancelled(self, square):
        token = CancellationToken()
        token.cancel()
        result, _ = _stitch({0: [square], 1: [square]}, cancel=token)
        assert result.cancelled
        assert result.mesh.is_empty

    def test_no_paths(self, square):
        store = InMemorySectionStore({0: [square]})
        result = SurfaceStitcher(store).stitch([])
        assert result.mesh.is_empty
        assert result.skipped == 0


class TestMesh:
    def test_weld_merges_and_drops_collapsed(self):
        vertices = np.array([
            [0, 0, 0], [1, 0, 0], [0, 1, 0],
            [1, 0, 0], [0, 1, 0], [1, 1, 0],
            [0, 0, 0], [0, 0, 0], [1, 0, 0],
        ], dtype=float)
        faces = np.array([[0, 1, 2], [3, 5, 4], [6, 7, 8]])
        welded = Mesh(vertices, faces).weld()
        assert welded.num_vertices == 4
        assert welded.num_faces == 2
        assert welded.surface_area == pytest.approx(1.0)

    def test_to_trimesh(self, pentagon):
        result, _ = _stitch({0: [pentagon], 1: [pentagon]})
        tm = result.mesh.to_trimesh()
        assert len(tm.faces) == result.mesh.num_faces
        assert len(tm.vertices) == result.mesh.num_vertices
        assert tm.area == pytest.approx(result.mesh.surface_area)

    def test_document_round_trip(self, pentagon):
        result, _ = _stitch({0: [pentagon], 1: [pentagon]})
        restored = Mesh.from_document(result.mesh.to_document())
        assert np.array_equal(restored.faces, result.mesh.faces)
        assert restored.vertices == pytest.approx(result.mesh.vertices)

    def test_empty_mesh(self):
        mesh = Mesh()
        assert mesh.is_empty
        assert mesh.surface_area == 0.0
        assert mesh.weld().num_vertices == 0
