"""Pipeline runner: reads pipeline.yaml and executes the enabled steps in order."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from .contracts import PipelineConfig, StepEntry

logger = logging.getLogger(__name__)


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(config_path: Path, config_class: type[BaseModel]) -> BaseModel:
    """Load a step YAML into its config model; a missing file means all defaults."""
    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(f"Step config {config_path} not found, using defaults")
        return config_class()
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def save_step_config(config: BaseModel, config_path: Path) -> None:
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)


def resolve_config_file(entry: StepEntry, pipeline_path: Path | None = None) -> Path:
    """Step config path as written, or relative to the pipeline file's directory."""
    path = Path(entry.config_file)
    if path.is_absolute() or path.exists() or pipeline_path is None:
        return path
    return Path(pipeline_path).parent / path


def import_step_class(module_path: str):
    """Import ``<module_path>.step`` and return the class whose name ends in 'Step'.

    e.g. 'secmorph.steps.s01_contour_matching' -> ContourMatchingStep
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def build_step(entry: StepEntry, pipeline_cfg: PipelineConfig, pipeline_path: Path | None = None):
    step_cls = import_step_class(entry.module)
    step_config = load_step_config(resolve_config_file(entry, pipeline_path), step_cls.config_type)
    return step_cls(config=step_config, data_root=pipeline_cfg.data_root)


def run_pipeline(config_path: Path) -> dict[str, BaseModel]:
    """Run every enabled step; each step's input is merged from its dependencies' outputs."""
    pipeline_cfg = load_pipeline_config(config_path)
    results: dict[str, BaseModel] = {}

    enabled_steps = [s for s in pipeline_cfg.steps if s.enabled]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(enabled_steps)} steps")

    for entry in enabled_steps:
        logger.info(f"--- Step: {entry.name} ---")
        step = build_step(entry, pipeline_cfg, config_path)

        input_data: dict[str, Any] = dict(entry.inputs)
        for dep in entry.depends_on:
            if dep in results:
                input_data.update(results[dep].model_dump())
            else:
                logger.warning(f"Step '{entry.name}' depends on '{dep}', which has not run")

        step_input = step.input_type(**input_data)
        results[entry.name] = step.execute(step_input)

    logger.info("Pipeline complete.")
    return results
