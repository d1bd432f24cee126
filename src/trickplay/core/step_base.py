"""Base class for all pipeline steps.

Every step declares typed Input and Output Pydantic models and shares the
run's single ``TrickplayConfig``. Engines are passed in through an
``EngineContext`` rather than configured globally.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

from .contracts import PipelineStage, TrickplayConfig
from .engines import EngineContext
from .errors import TrickplayError

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT]):
    """Abstract base for pipeline steps.

    Subclasses must:
    1. Define concrete Pydantic models for InputT and OutputT
    2. Set class variables: name, stage, input_type, output_type
    3. Implement run() and validate_inputs()

    ``validation_error`` is the error type raised when validate_inputs()
    rejects the inputs.
    """

    name: ClassVar[str] = ""
    stage: ClassVar[PipelineStage]
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    validation_error: ClassVar[type[TrickplayError]] = TrickplayError

    def __init__(self, config: TrickplayConfig, context: EngineContext):
        self.config = config
        self.context = context

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artifacts exist and are valid."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, validation and a cancellation check."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise self.validation_error(
                f"[{step_name}] Input validation failed", stage=self.stage
            )

        self.context.cancel_token.raise_if_cancelled(self.stage)

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        return cls.output_type.model_json_schema()
