"""Typed failures raised by the trickplay pipeline.

Every error records the pipeline stage it was raised in and, where a single
frame or sheet is at fault, its index.
"""

from __future__ import annotations

from .contracts import PipelineStage


class TrickplayError(Exception):
    """Base class for all pipeline failures."""

    default_stage: PipelineStage = PipelineStage.PROBING

    def __init__(
        self,
        message: str,
        stage: PipelineStage | None = None,
        index: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.index = index

    def __str__(self) -> str:
        where = f"[{self.stage.value}]"
        if self.index is not None:
            where += f"[#{self.index}]"
        return f"{where} {self.message}"


class InputNotFound(TrickplayError):
    default_stage = PipelineStage.PROBING


class ProbeFailure(TrickplayError):
    default_stage = PipelineStage.PROBING


class ScheduleError(TrickplayError):
    default_stage = PipelineStage.SCHEDULING


class ExtractionFailure(TrickplayError):
    default_stage = PipelineStage.EXTRACTING


class DirectoryMissing(TrickplayError):
    default_stage = PipelineStage.LOADING


class FilenameParseError(TrickplayError):
    default_stage = PipelineStage.LOADING


class PackingError(TrickplayError):
    default_stage = PipelineStage.PACKING


class CompositeFailure(TrickplayError):
    default_stage = PipelineStage.COMPOSITING


class WriteFailure(TrickplayError):
    default_stage = PipelineStage.COMPOSITING


class PipelineCancelled(TrickplayError):
    """Raised when a caller cancels a run through its CancellationToken."""
