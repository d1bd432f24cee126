"""Pipeline orchestrator: runs the trickplay stages in order.

Probing -> Scheduling -> (Extracting) -> Loading -> Packing -> Compositing -> Persisted.
Any failure aborts the run; a re-run starts again from probing.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .cancellation import CancellationToken
from .contracts import PipelineStage, TrickplayConfig
from .engines import EngineContext, build_engine_context

logger = logging.getLogger(__name__)


class TrickplayOutput(BaseModel):
    """Summary of a completed run."""

    video_path: Path
    output_dir: Path
    frames_dir: Path
    tilesheet_dir: Path
    timestamps: list[float] = Field(default_factory=list)
    frame_count: int = 0
    frame_height: int = 0
    sheet_count: int = 0
    sheet_paths: list[Path] = Field(default_factory=list)
    stage: PipelineStage = PipelineStage.PERSISTED


class TrickplayPlan(BaseModel):
    """What a run would produce, computed without touching any image."""

    video_path: Path
    duration_seconds: float
    timestamps: list[float] = Field(default_factory=list)
    timestamp_source: str
    frame_count: int
    total_rows: int
    sheet_count: int
    frames_per_sheet: list[int] = Field(default_factory=list)
    tilesheet_dir: Path


def load_trickplay_config(config_path: Path | None = None, **overrides: Any) -> TrickplayConfig:
    """Load a YAML config and apply caller overrides (None values are ignored)."""
    raw: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return TrickplayConfig(**raw)


def _enter(stage: PipelineStage) -> None:
    logger.info(f"--- Stage: {stage.value} ---")


def plan_trickplay(
    video_path: Path,
    config: TrickplayConfig | None = None,
    context: EngineContext | None = None,
) -> TrickplayPlan:
    """Probe and schedule a video and report the sheet layout it would get."""
    from trickplay.steps.s01_probe.contracts import ProbeInput
    from trickplay.steps.s01_probe.step import ProbeStep
    from trickplay.steps.s02_schedule.contracts import ScheduleInput
    from trickplay.steps.s02_schedule.step import ScheduleStep
    from trickplay.steps.s05_pack_grid._packing import sheet_frame_counts

    config = config or TrickplayConfig()
    context = context or build_engine_context(config)
    video_path = Path(video_path)

    probed = ProbeStep(config, context).execute(ProbeInput(video_path=video_path))
    schedule = ScheduleStep(config, context).execute(
        ScheduleInput(duration_seconds=probed.video.duration_seconds)
    )
    per_sheet = sheet_frame_counts(schedule.frame_count, config.sheet_columns, config.sheet_rows)
    total_rows = math.ceil(schedule.frame_count / config.sheet_columns)
    return TrickplayPlan(
        video_path=video_path,
        duration_seconds=probed.video.duration_seconds,
        timestamps=schedule.timestamps,
        timestamp_source=schedule.source,
        frame_count=schedule.frame_count,
        total_rows=total_rows,
        sheet_count=len(per_sheet),
        frames_per_sheet=per_sheet,
        tilesheet_dir=config.tilesheet_dir(video_path),
    )


def run_trickplay(
    video_path: Path,
    config: TrickplayConfig | None = None,
    context: EngineContext | None = None,
    cancel_token: CancellationToken | None = None,
) -> TrickplayOutput:
    """Execute the full pipeline for one video.

    ``context`` overrides the engines built from ``config``; ``cancel_token``
    is used in place of the context's token for this run only, so the caller
    can abort it without touching the context it passed in.
    """
    from trickplay.steps.s01_probe.contracts import ProbeInput
    from trickplay.steps.s01_probe.step import ProbeStep
    from trickplay.steps.s02_schedule.contracts import ScheduleInput
    from trickplay.steps.s02_schedule.step import ScheduleStep
    from trickplay.steps.s03_extract_frames.contracts import ExtractFramesInput
    from trickplay.steps.s03_extract_frames.step import ExtractFramesStep
    from trickplay.steps.s04_load_frames.contracts import LoadFramesInput
    from trickplay.steps.s04_load_frames.step import LoadFramesStep
    from trickplay.steps.s05_pack_grid.contracts import PackGridInput
    from trickplay.steps.s05_pack_grid.step import PackGridStep
    from trickplay.steps.s06_composite.contracts import CompositeInput
    from trickplay.steps.s06_composite.step import CompositeStep

    config = config or TrickplayConfig()
    context = context or build_engine_context(config)
    if cancel_token is not None:
        context = dataclasses.replace(context, cancel_token=cancel_token)
    video_path = Path(video_path)
    frames_dir = config.frames_dir(video_path)
    tilesheet_dir = config.tilesheet_dir(video_path)

    logger.info(f"Performing trickplay on: {video_path}")

    _enter(PipelineStage.PROBING)
    probed = ProbeStep(config, context).execute(ProbeInput(video_path=video_path))

    _enter(PipelineStage.SCHEDULING)
    schedule = ScheduleStep(config, context).execute(
        ScheduleInput(duration_seconds=probed.video.duration_seconds)
    )

    if config.skip_frame_extraction:
        logger.info(f"Skipping frame extraction; reusing {frames_dir}")
    else:
        _enter(PipelineStage.EXTRACTING)
        ExtractFramesStep(config, context).execute(
            ExtractFramesInput(
                video_path=video_path, timestamps=schedule.timestamps, frames_dir=frames_dir
            )
        )

    _enter(PipelineStage.LOADING)
    loaded = LoadFramesStep(config, context).execute(
        LoadFramesInput(frames_dir=frames_dir, expected_count=schedule.frame_count)
    )

    _enter(PipelineStage.PACKING)
    packed = PackGridStep(config, context).execute(PackGridInput(frames=loaded.frames))

    _enter(PipelineStage.COMPOSITING)
    composite = CompositeStep(config, context).execute(
        CompositeInput(frames=packed.frames, layout=packed.layout, tilesheet_dir=tilesheet_dir)
    )

    _enter(PipelineStage.PERSISTED)
    return TrickplayOutput(
        video_path=video_path,
        output_dir=config.resolve_output_dir(video_path),
        frames_dir=frames_dir,
        tilesheet_dir=composite.tilesheet_dir,
        timestamps=schedule.timestamps,
        frame_count=packed.layout.frame_count,
        frame_height=packed.layout.frame_height,
        sheet_count=packed.layout.sheet_count,
        sheet_paths=composite.sheet_paths,
    )
