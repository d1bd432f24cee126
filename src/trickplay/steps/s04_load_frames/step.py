"""Step 04: Scan the frames directory into ordered frame records."""

from __future__ import annotations

import logging
from typing import ClassVar

from trickplay.core.contracts import PipelineStage
from trickplay.core.errors import DirectoryMissing
from trickplay.core.step_base import BaseStep
from ._scan import scan_frame_directory
from .contracts import LoadFramesInput, LoadFramesOutput

logger = logging.getLogger(__name__)


class LoadFramesStep(BaseStep[LoadFramesInput, LoadFramesOutput]):
    name: ClassVar[str] = "load_frames"
    stage: ClassVar[PipelineStage] = PipelineStage.LOADING
    input_type: ClassVar = LoadFramesInput
    output_type: ClassVar = LoadFramesOutput
    validation_error: ClassVar = DirectoryMissing

    def validate_inputs(self, inputs: LoadFramesInput) -> bool:
        if not inputs.frames_dir.is_dir():
            logger.error(f"Frames directory not found: {inputs.frames_dir}")
            return False
        return True

    def run(self, inputs: LoadFramesInput) -> LoadFramesOutput:
        frames = scan_frame_directory(inputs.frames_dir, self.config.frame_file_format)

        gaps = [f.file_number for f in frames if f.file_number != f.index]
        if gaps:
            logger.warning(f"Frame numbering has gaps; first renumbered file is {gaps[0]}")
        if inputs.expected_count is not None and len(frames) != inputs.expected_count:
            logger.warning(
                f"Found {len(frames)} frames in {inputs.frames_dir}, "
                f"schedule has {inputs.expected_count}"
            )

        logger.info(f"Loaded {len(frames)} frames from {inputs.frames_dir}")
        return LoadFramesOutput(frames_dir=inputs.frames_dir, frames=frames)
