"""Step 05: Measure frames and compute their tilesheet placements."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import ClassVar

from trickplay.core.contracts import FrameRecord, PipelineStage
from trickplay.core.errors import CompositeFailure, PackingError, TrickplayError
from trickplay.core.step_base import BaseStep
from ._packing import pack_grid
from .contracts import PackGridInput, PackGridOutput

logger = logging.getLogger(__name__)


class PackGridStep(BaseStep[PackGridInput, PackGridOutput]):
    name: ClassVar[str] = "pack_grid"
    stage: ClassVar[PipelineStage] = PipelineStage.PACKING
    input_type: ClassVar = PackGridInput
    output_type: ClassVar = PackGridOutput
    validation_error: ClassVar = PackingError

    def validate_inputs(self, inputs: PackGridInput) -> bool:
        indices = [f.index for f in inputs.frames]
        if indices != list(range(len(indices))):
            logger.error("Frame indices are not a contiguous 0-based sequence")
            return False
        return True

    def _measure(self, frame: FrameRecord) -> FrameRecord:
        self.context.cancel_token.raise_if_cancelled(self.stage, frame.index)
        try:
            width, height = self.context.image_engine.measure(frame.file_path)
        except TrickplayError:
            raise
        except Exception as exc:
            raise CompositeFailure(
                f"Cannot decode {frame.file_path}: {exc}", stage=self.stage, index=frame.index
            ) from exc
        return frame.model_copy(update={"pixel_width": width, "pixel_height": height})

    def _cell_height(self, frames: list[FrameRecord]) -> int:
        for frame in frames:
            if frame.pixel_width > self.config.frame_width:
                raise PackingError(
                    f"{frame.file_path.name} is {frame.pixel_width}px wide, "
                    f"cells are {self.config.frame_width}px",
                    index=frame.index,
                )

        heights = {f.pixel_height for f in frames}
        if len(heights) > 1:
            if self.config.require_uniform_height:
                odd = next(f for f in frames if f.pixel_height != frames[0].pixel_height)
                raise PackingError(
                    f"Frame heights differ ({sorted(heights)}); "
                    f"{odd.file_path.name} is {odd.pixel_height}px, "
                    f"frame 0 is {frames[0].pixel_height}px",
                    index=odd.index,
                )
            logger.warning(f"Frame heights differ {sorted(heights)}; using tallest as cell height")
        return max(heights)

    def run(self, inputs: PackGridInput) -> PackGridOutput:
        frames = inputs.frames
        if frames:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                frames = list(pool.map(self._measure, frames))
            frame_height = self._cell_height(frames)
        else:
            frame_height = 0

        layout = pack_grid(
            len(frames),
            self.config.sheet_columns,
            self.config.sheet_rows,
            self.config.frame_width,
            frame_height,
        )
        logger.info(
            f"Packed {layout.frame_count} frames into {layout.total_rows} rows "
            f"on {layout.sheet_count} sheets (cell {layout.frame_width}x{layout.frame_height})"
        )
        return PackGridOutput(frames=frames, layout=layout)
