"""Trickplay core: pipeline runner, base step, shared contracts, engines."""

from .cancellation import CancellationToken
from .contracts import (
    FrameRecord,
    GridLayout,
    PipelineStage,
    Placement,
    TilesheetSpec,
    TrickplayConfig,
    VideoAsset,
)
from .engines import EngineContext, build_engine_context
from .errors import (
    CompositeFailure,
    DirectoryMissing,
    ExtractionFailure,
    FilenameParseError,
    InputNotFound,
    PackingError,
    PipelineCancelled,
    ProbeFailure,
    ScheduleError,
    TrickplayError,
    WriteFailure,
)
from .logging import setup_logging
from .pipeline_runner import (
    TrickplayOutput,
    TrickplayPlan,
    load_trickplay_config,
    plan_trickplay,
    run_trickplay,
)
from .step_base import BaseStep

__all__ = [
    "BaseStep",
    "CancellationToken",
    "CompositeFailure",
    "DirectoryMissing",
    "EngineContext",
    "ExtractionFailure",
    "FilenameParseError",
    "FrameRecord",
    "GridLayout",
    "InputNotFound",
    "PackingError",
    "PipelineCancelled",
    "PipelineStage",
    "Placement",
    "ProbeFailure",
    "ScheduleError",
    "TilesheetSpec",
    "TrickplayConfig",
    "TrickplayError",
    "TrickplayOutput",
    "TrickplayPlan",
    "VideoAsset",
    "WriteFailure",
    "build_engine_context",
    "load_trickplay_config",
    "plan_trickplay",
    "run_trickplay",
    "setup_logging",
]
