"""JSON artefacts exchanged between pipeline steps."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from secmorph.core.contracts import MeshDocument, SectionStackDocument
from secmorph.core.section_store import InMemorySectionStore

logger = logging.getLogger(__name__)


def load_section_stack(path: Path) -> InMemorySectionStore:
    """Read a sections.json file into an in-memory store."""
    with open(path, encoding="utf-8") as f:
        doc = SectionStackDocument.model_validate_json(f.read())
    store = InMemorySectionStore.from_document(doc)
    logger.info(f"Loaded {store.contour_count} contours in {len(store)} sections from {path}")
    return store


def save_section_stack(store: InMemorySectionStore | SectionStackDocument, path: Path) -> Path:
    doc = store if isinstance(store, SectionStackDocument) else store.to_document()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(doc.model_dump_json(indent=2))
    return path


def load_mesh_document(path: Path) -> MeshDocument:
    with open(path, encoding="utf-8") as f:
        return MeshDocument.model_validate_json(f.read())


def save_mesh_document(doc: MeshDocument, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(doc.model_dump_json())
    return path


def save_json(data: Any, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def load_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
