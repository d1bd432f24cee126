"""Step 02: Decide which moments of the video to sample."""

from __future__ import annotations

import logging
from typing import ClassVar

from trickplay.core.contracts import PipelineStage
from trickplay.core.errors import ScheduleError
from trickplay.core.step_base import BaseStep
from ._timestamps import compute_timestamps
from .contracts import ScheduleInput, ScheduleOutput

logger = logging.getLogger(__name__)


class ScheduleStep(BaseStep[ScheduleInput, ScheduleOutput]):
    name: ClassVar[str] = "schedule"
    stage: ClassVar[PipelineStage] = PipelineStage.SCHEDULING
    input_type: ClassVar = ScheduleInput
    output_type: ClassVar = ScheduleOutput
    validation_error: ClassVar = ScheduleError

    def validate_inputs(self, inputs: ScheduleInput) -> bool:
        # compute_timestamps validates ranges.
        return True

    def run(self, inputs: ScheduleInput) -> ScheduleOutput:
        timestamps, source = compute_timestamps(
            inputs.duration_seconds,
            self.config.seconds_between_frames,
            frame_timestamps=self.config.frame_timestamps,
            frame_count=self.config.frame_count,
        )

        late = [ts for ts in timestamps if ts > inputs.duration_seconds]
        if late:
            logger.warning(f"{len(late)} timestamps fall after the end of the video")

        logger.info(f"Scheduled {len(timestamps)} frames ({source})")
        return ScheduleOutput(timestamps=timestamps, frame_count=len(timestamps), source=source)
