"""Base class for all pipeline steps.

A step declares typed Input, Output and Config pydantic models, so the runner
can wire one step's output into the next step's input and the CLI can print
each step's JSON schema.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses set ``name``, ``input_type``, ``output_type`` and ``config_type``
    and implement ``run`` and ``validate_inputs``:

        class ContourMatchingStep(BaseStep[MatchingInput, MatchingOutput, MatchingConfig]):
            name = "contour_matching"
            input_type = MatchingInput
            output_type = MatchingOutput
            config_type = MatchingConfig
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Do the step's work and return its output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """True if every input artefact exists and can be read."""
        ...

    def interim_dir(self, subdir: str) -> Path:
        """``data_root/interim/<subdir>``, created on demand."""
        out = self.data_root / "interim" / subdir
        out.mkdir(parents=True, exist_ok=True)
        return out

    def execute(self, inputs: InputT) -> OutputT:
        """Validate, run and time the step."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        logger.info(f"[{step_name}] Done in {time.time() - t0:.1f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        return cls.config_type.model_json_schema()
