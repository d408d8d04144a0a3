"""secmorph core: pipeline runner, base step, shared contracts, section store."""

from .step_base import BaseStep
from .contracts import MeshDocument, PipelineConfig, SectionStackDocument, StepEntry, StepMeta
from .errors import (
    DecimationExhaustedError,
    DegenerateGeometryError,
    MorphError,
    StitchError,
    UnmatchableSectionError,
)
from .pipeline_runner import run_pipeline, load_pipeline_config
from .section_store import InMemorySectionStore, SectionStore
from .tasks import CancellationToken, MorphTask, ProgressCallback
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "CancellationToken",
    "DecimationExhaustedError",
    "DegenerateGeometryError",
    "InMemorySectionStore",
    "MeshDocument",
    "MorphError",
    "MorphTask",
    "PipelineConfig",
    "ProgressCallback",
    "SectionStackDocument",
    "SectionStore",
    "StepEntry",
    "StepMeta",
    "StitchError",
    "UnmatchableSectionError",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
