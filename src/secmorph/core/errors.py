"""Error kinds raised by the morph engine.

Per-contour and per-path failures are isolated by the callers: the walker skips
degenerate contours, the interpolator clamps exhausted decimation, and the
stitcher drops a failing ribbon. None of these abort a whole run.
"""

from __future__ import annotations


class MorphError(Exception):
    """Base class for all engine errors."""


class DegenerateGeometryError(MorphError):
    """Polygon has <3 vertices, zero perimeter, or an undefined centroid angle."""


class UnmatchableSectionError(MorphError):
    """No predecessor or successor contour could be matched for a transition."""


class DecimationExhaustedError(MorphError):
    """A source contour cannot lose another vertex without becoming degenerate."""


class StitchError(MorphError):
    """A ribbon between two matched contours could not be triangulated."""
