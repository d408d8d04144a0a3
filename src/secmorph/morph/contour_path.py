"""Morph paths: chains of contour matches following one structure through the stack."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from .contour_matcher import ContourMatch


@dataclass(frozen=True, eq=False)
class ContourPath:
    """One branch of the section graph.

    Paths are values: ``extend`` and ``branch`` return new paths and leave the
    receiver untouched, so a bifurcation simply yields two paths that share
    their history up to the split.
    """

    start_polygon: np.ndarray
    start_section: int
    matches: tuple[ContourMatch, ...] = field(default_factory=tuple)
    path_id: int = 0
    parent_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def last_polygon(self) -> np.ndarray:
        if self.matches:
            return self.matches[-1].ordered_target
        return self.start_polygon

    @property
    def last_section(self) -> int:
        if self.matches:
            return self.matches[-1].next_section
        return self.start_section

    @property
    def sections(self) -> list[int]:
        return [self.start_section] + [m.next_section for m in self.matches]

    def extend(self, match: ContourMatch) -> ContourPath:
        return replace(self, matches=self.matches + (match,))

    def branch(self, match: ContourMatch, path_id: int) -> ContourPath:
        """New path sharing this path's history, continuing through ``match``."""
        return replace(
            self,
            matches=self.matches + (match,),
            path_id=path_id,
            parent_id=self.path_id,
        )


def paths_to_dict(paths: list[ContourPath]) -> dict:
    """Serialize paths; a match shared by a branch and its parent is written once."""
    match_ids: dict[int, int] = {}
    matches: list[dict] = []
    path_docs = []
    for path in paths:
        ids = []
        for m in path.matches:
            if id(m) not in match_ids:
                match_ids[id(m)] = len(matches)
                matches.append(m.to_dict())
            ids.append(match_ids[id(m)])
        path_docs.append({
            "path_id": path.path_id,
            "parent_id": path.parent_id,
            "start_section": path.start_section,
            "start_polygon": path.start_polygon.tolist(),
            "sections": path.sections,
            "match_ids": ids,
        })
    return {"matches": matches, "paths": path_docs}


def paths_from_dict(data: dict) -> list[ContourPath]:
    matches = [ContourMatch.from_dict(m) for m in data.get("matches", [])]
    paths = []
    for doc in data.get("paths", []):
        paths.append(ContourPath(
            start_polygon=np.array(doc["start_polygon"], dtype=np.float64).reshape(-1, 2),
            start_section=int(doc["start_section"]),
            matches=tuple(matches[i] for i in doc["match_ids"]),
            path_id=int(doc["path_id"]),
            parent_id=doc.get("parent_id"),
        ))
    return paths
