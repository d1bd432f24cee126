"""Step 01: Ask the media prober for the video's duration."""

from __future__ import annotations

import logging
import math
from typing import ClassVar

from trickplay.core.contracts import PipelineStage, VideoAsset
from trickplay.core.errors import InputNotFound, ProbeFailure, TrickplayError
from trickplay.core.step_base import BaseStep
from .contracts import ProbeInput, ProbeOutput

logger = logging.getLogger(__name__)


class ProbeStep(BaseStep[ProbeInput, ProbeOutput]):
    name: ClassVar[str] = "probe"
    stage: ClassVar[PipelineStage] = PipelineStage.PROBING
    input_type: ClassVar = ProbeInput
    output_type: ClassVar = ProbeOutput
    validation_error: ClassVar = InputNotFound

    def validate_inputs(self, inputs: ProbeInput) -> bool:
        if not inputs.video_path.is_file():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    def run(self, inputs: ProbeInput) -> ProbeOutput:
        try:
            duration = self.context.prober.probe(inputs.video_path)
        except TrickplayError:
            raise
        except Exception as exc:
            raise ProbeFailure(f"Probe failed for {inputs.video_path}: {exc}") from exc

        if duration is None or not math.isfinite(duration) or duration < 0:
            raise ProbeFailure(f"No usable duration for {inputs.video_path}: {duration!r}")

        logger.info(f"Duration of {inputs.video_path.name}: {duration:.2f}s")
        return ProbeOutput(
            video=VideoAsset(source_path=inputs.video_path, duration_seconds=float(duration))
        )
