"""Section store: the ordered, sparse stack of contours the engine consumes.

The engine only needs ordered access to per-section contour lists and the
section-to-distance mapping, so any object satisfying ``SectionStore`` works.
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np

from secmorph.core.contracts import SectionStackDocument
from secmorph.utils.geometry import as_polygon

logger = logging.getLogger(__name__)


@runtime_checkable
class SectionStore(Protocol):
    spacing: float

    def first_section_index(self) -> int: ...

    def last_section_index(self) -> int: ...

    def has_section(self, index: int) -> bool: ...

    def contours_at(self, index: int) -> list[np.ndarray]: ...

    def distance_of(self, index: int) -> float: ...


class InMemorySectionStore:
    """Dict-backed section store with uniform spacing.

    ``distance_of(i) = origin + i * spacing``. Sections with no contours are
    dropped at construction so ``has_section`` means "has at least one contour".
    """

    def __init__(
        self,
        sections: Mapping[int, Sequence] | None = None,
        spacing: float = 1.0,
        origin: float = 0.0,
        name: str = "Unnamed",
    ):
        if spacing <= 0:
            raise ValueError(f"spacing must be positive, got {spacing}")
        self.spacing = float(spacing)
        self.origin = float(origin)
        self.name = name
        self._sections: dict[int, list[np.ndarray]] = {}
        for idx, polys in (sections or {}).items():
            for poly in polys:
                self.add_contour(int(idx), poly)

    def add_contour(self, index: int, polygon) -> None:
        self._sections.setdefault(index, []).append(as_polygon(polygon))

    def first_section_index(self) -> int:
        if not self._sections:
            raise IndexError("Section store is empty")
        return min(self._sections)

    def last_section_index(self) -> int:
        if not self._sections:
            raise IndexError("Section store is empty")
        return max(self._sections)

    def has_section(self, index: int) -> bool:
        return bool(self._sections.get(index))

    def contours_at(self, index: int) -> list[np.ndarray]:
        return [p.copy() for p in self._sections.get(index, [])]

    def distance_of(self, index: int) -> float:
        return self.origin + index * self.spacing

    def section_indices(self) -> list[int]:
        return sorted(self._sections)

    def __iter__(self) -> Iterator[tuple[int, list[np.ndarray]]]:
        for idx in self.section_indices():
            yield idx, self.contours_at(idx)

    def __len__(self) -> int:
        return len(self._sections)

    @property
    def contour_count(self) -> int:
        return sum(len(v) for v in self._sections.values())

    @classmethod
    def from_document(cls, doc: SectionStackDocument) -> InMemorySectionStore:
        return cls(doc.sections, spacing=doc.spacing, origin=doc.origin, name=doc.name)

    def to_document(self) -> SectionStackDocument:
        return SectionStackDocument(
            name=self.name,
            spacing=self.spacing,
            origin=self.origin,
            sections={idx: [p.tolist() for p in polys] for idx, polys in self._sections.items()},
        )
