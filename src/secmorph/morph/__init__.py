"""Contour matching, interpolation and surface stitching."""

from .config import MorphConfig
from .contour_matcher import ContourMatch, ContourMatcher, VertexMatch, match_contours
from .contour_path import ContourPath, paths_from_dict, paths_to_dict
from .engine import MorphOrchestrator, MorphResult
from .interpolator import MorphInterpolator, MorphSeries, interpolate_paths
from .radial_profile import RadialProfile
from .section_walker import SectionGraphWalker, WalkResult, match_contours_by_centroid
from .stitcher import Mesh, StitchResult, SurfaceStitcher, strip_triangulate
from .tangents import MatchTangents, TangentEstimator

__all__ = [
    "ContourMatch",
    "ContourMatcher",
    "ContourPath",
    "MatchTangents",
    "Mesh",
    "MorphConfig",
    "MorphInterpolator",
    "MorphOrchestrator",
    "MorphResult",
    "MorphSeries",
    "RadialProfile",
    "SectionGraphWalker",
    "StitchResult",
    "SurfaceStitcher",
    "TangentEstimator",
    "VertexMatch",
    "WalkResult",
    "interpolate_paths",
    "match_contours",
    "match_contours_by_centroid",
    "paths_from_dict",
    "paths_to_dict",
    "strip_triangulate",
]
