"""Step 03: Materialise one frame image per scheduled timestamp."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from trickplay.core.contracts import PipelineStage
from trickplay.core.errors import ExtractionFailure, InputNotFound, TrickplayError
from trickplay.core.step_base import BaseStep
from trickplay.utils.file_utils import remove_files_with_suffix
from .contracts import ExtractFramesInput, ExtractFramesOutput

logger = logging.getLogger(__name__)


class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput]):
    name: ClassVar[str] = "extract_frames"
    stage: ClassVar[PipelineStage] = PipelineStage.EXTRACTING
    input_type: ClassVar = ExtractFramesInput
    output_type: ClassVar = ExtractFramesOutput
    validation_error: ClassVar = InputNotFound

    def validate_inputs(self, inputs: ExtractFramesInput) -> bool:
        if not inputs.video_path.is_file():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        output_dir = inputs.frames_dir
        if not output_dir.exists():
            logger.info(f"Making raw frames directory at: {output_dir}")
        output_dir.mkdir(parents=True, exist_ok=True)

        removed = remove_files_with_suffix(output_dir, self.config.frame_file_format)
        if removed:
            logger.info(f"Removed {removed} stale frames from {output_dir}")

        extracted: list[str] = []
        try:
            for path in self.context.extractor.extract(
                inputs.video_path,
                inputs.timestamps,
                self.config.frame_width,
                output_dir,
                self.config.frame_file_format,
                self.context.cancel_token,
            ):
                extracted.append(Path(path).name)
                logger.debug(f"Extracted {path}")
        except TrickplayError:
            raise
        except Exception as exc:
            index = len(extracted)
            ts = inputs.timestamps[index] if index < len(inputs.timestamps) else None
            raise ExtractionFailure(
                f"Frame extraction failed at {ts}s: {exc}", index=index
            ) from exc

        if len(extracted) != len(inputs.timestamps):
            raise ExtractionFailure(
                f"Extractor produced {len(extracted)} frames for {len(inputs.timestamps)} timestamps",
                index=len(extracted),
            )

        logger.info(f"Extracted {len(extracted)} frames into {output_dir}")
        return ExtractFramesOutput(
            frames_dir=output_dir,
            frame_count=len(extracted),
            frame_list=extracted,
        )
