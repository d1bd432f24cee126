"""Step 06: Blit frames onto per-sheet canvases and persist them.

Frames are decoded concurrently on a bounded worker pool. Each sheet's canvas
is written only by the loop compositing that sheet, which blits decoded frames
one at a time as they complete. A sheet is handed to the pool for encoding as
soon as its last frame is blitted; all encodes are joined before returning.
"""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, ClassVar

from trickplay.core.contracts import FrameRecord, PipelineStage, Placement, TilesheetSpec
from trickplay.core.errors import CompositeFailure, PackingError, TrickplayError, WriteFailure
from trickplay.core.step_base import BaseStep
from trickplay.utils.file_utils import remove_files_with_suffix
from .contracts import CompositeInput, CompositeOutput

logger = logging.getLogger(__name__)


def _staging_dir(tilesheet_dir: Path) -> Path:
    return tilesheet_dir.with_name(f".{tilesheet_dir.name}.staging")


def _publish(staging_dir: Path, tilesheet_dir: Path) -> None:
    """Swap the staged sheets in; the previous directory is set aside until the swap lands."""
    previous = tilesheet_dir.with_name(f".{tilesheet_dir.name}.previous")
    if previous.exists():
        shutil.rmtree(previous)
    if tilesheet_dir.exists():
        tilesheet_dir.rename(previous)
    staging_dir.rename(tilesheet_dir)
    shutil.rmtree(previous, ignore_errors=True)


class CompositeStep(BaseStep[CompositeInput, CompositeOutput]):
    name: ClassVar[str] = "composite"
    stage: ClassVar[PipelineStage] = PipelineStage.COMPOSITING
    input_type: ClassVar = CompositeInput
    output_type: ClassVar = CompositeOutput
    validation_error: ClassVar = PackingError

    def validate_inputs(self, inputs: CompositeInput) -> bool:
        layout = inputs.layout
        if len(inputs.frames) != layout.frame_count:
            logger.error(f"{len(inputs.frames)} frames for a layout of {layout.frame_count}")
            return False
        if (layout.sheet_columns, layout.sheet_rows, layout.frame_width) != (
            self.config.sheet_columns, self.config.sheet_rows, self.config.frame_width
        ):
            logger.error("Layout grid does not match the run configuration")
            return False
        return True

    def run(self, inputs: CompositeInput) -> CompositeOutput:
        layout = inputs.layout
        if layout.sheet_count == 0:
            self._clear_stale_sheets(inputs.tilesheet_dir)
            logger.info("No frames to composite; no tilesheets written")
            return CompositeOutput(tilesheet_dir=inputs.tilesheet_dir, sheet_paths=[])

        if self.config.atomic_output:
            target_dir = _staging_dir(inputs.tilesheet_dir)
            if target_dir.exists():
                shutil.rmtree(target_dir)
        else:
            target_dir = inputs.tilesheet_dir
            self._clear_stale_sheets(target_dir)
        logger.info(f"Preparing to put the trickplay tilesheets into: {target_dir}")
        target_dir.mkdir(parents=True, exist_ok=True)

        try:
            written = self._composite_all(inputs.frames, layout.sheets, target_dir)
        except BaseException:
            if self.config.atomic_output:
                logger.info(f"Discarding staged tilesheets in {target_dir}")
                shutil.rmtree(target_dir, ignore_errors=True)
            raise

        if self.config.atomic_output:
            _publish(target_dir, inputs.tilesheet_dir)
            written = [inputs.tilesheet_dir / p.name for p in written]

        logger.info(f"Wrote {len(written)} tilesheets to {inputs.tilesheet_dir}")
        return CompositeOutput(tilesheet_dir=inputs.tilesheet_dir, sheet_paths=written)

    def _clear_stale_sheets(self, tilesheet_dir: Path) -> None:
        removed = remove_files_with_suffix(tilesheet_dir, self.config.sheet_file_format)
        if removed:
            logger.info(f"Removed {removed} stale tilesheets from {tilesheet_dir}")

    def _composite_all(
        self, frames: list[FrameRecord], sheets: list[TilesheetSpec], target_dir: Path
    ) -> list[Path]:
        persists: list[Future] = []
        pool = ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            for sheet in sheets:
                self.context.cancel_token.raise_if_cancelled(self.stage, sheet.sheet_index)
                canvas = self._composite_sheet(pool, frames, sheet)
                out_path = target_dir / f"{sheet.sheet_index}.{self.config.sheet_file_format}"
                persists.append(pool.submit(self._persist, canvas, out_path, sheet.sheet_index))
            return [future.result() for future in persists]
        except BaseException:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True)

    def _composite_sheet(
        self, pool: ThreadPoolExecutor, frames: list[FrameRecord], sheet: TilesheetSpec
    ) -> Any:
        engine = self.context.image_engine
        try:
            canvas = engine.new_canvas(
                sheet.width_pixels, sheet.height_pixels, self.config.background_color
            )
        except Exception as exc:
            raise CompositeFailure(
                f"Cannot allocate {sheet.width_pixels}x{sheet.height_pixels} canvas: {exc}",
                index=sheet.sheet_index,
            ) from exc

        pending: dict[Future, Placement] = {
            pool.submit(self._decode, frames[p.frame_index]): p for p in sheet.placements
        }
        for future in as_completed(pending):
            placement = pending[future]
            frame = frames[placement.frame_index]
            image = future.result()
            self._blit(canvas, image, frame, placement)

        logger.debug(f"Sheet {sheet.sheet_index}: blitted {len(sheet.placements)} frames")
        return canvas

    def _decode(self, frame: FrameRecord) -> Any:
        self.context.cancel_token.raise_if_cancelled(self.stage, frame.index)
        try:
            return self.context.image_engine.decode(frame.file_path)
        except TrickplayError:
            raise
        except Exception as exc:
            raise CompositeFailure(
                f"Cannot decode {frame.file_path}: {exc}", index=frame.index
            ) from exc

    def _blit(self, canvas: Any, image: Any, frame: FrameRecord, placement: Placement) -> None:
        engine = self.context.image_engine
        size = engine.dimensions(image)
        if frame.pixel_width is not None and size != (frame.pixel_width, frame.pixel_height):
            raise CompositeFailure(
                f"{frame.file_path.name} decoded as {size[0]}x{size[1]}, "
                f"measured {frame.pixel_width}x{frame.pixel_height}",
                index=frame.index,
            )
        try:
            engine.blit(canvas, image, placement.x_pixel, placement.y_pixel)
        except Exception as exc:
            raise CompositeFailure(
                f"Cannot place {frame.file_path.name} at "
                f"({placement.x_pixel}, {placement.y_pixel}) on sheet {placement.sheet_index}: {exc}",
                index=frame.index,
            ) from exc

    def _persist(self, canvas: Any, out_path: Path, sheet_index: int) -> Path:
        try:
            self.context.image_engine.encode(canvas, out_path, self.config.sheet_file_format)
        except Exception as exc:
            raise WriteFailure(f"Cannot write {out_path}: {exc}", index=sheet_index) from exc
        logger.info(f"Wrote tilesheet {out_path}")
        return out_path
