"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PipelineStage(str, Enum):
    """Stages of a run, in execution order."""

    PROBING = "probing"
    SCHEDULING = "scheduling"
    EXTRACTING = "extracting"
    LOADING = "loading"
    PACKING = "packing"
    COMPOSITING = "compositing"
    PERSISTED = "persisted"


class TrickplayConfig(BaseModel):
    """Run configuration, built once from defaults plus caller overrides."""

    model_config = ConfigDict(frozen=True)

    output_dir: Path | None = Field(
        None, description="Root for frames/ and tilesheets (None = <video stem>.trickplay)"
    )
    seconds_between_frames: float = Field(10.0, gt=0, description="Sampling interval in seconds")
    frame_timestamps: list[float] = Field(
        default_factory=list, description="Explicit sample offsets; wins over interval when non-empty"
    )
    frame_count: int | None = Field(
        None, ge=0, description="Evenly spaced sample count; bypasses the interval"
    )
    frame_width: int = Field(320, gt=0, description="Pixel width of each sampled frame")
    sheet_columns: int = Field(10, gt=0, description="Frames per tilesheet row")
    sheet_rows: int = Field(10, gt=0, description="Rows per tilesheet")
    skip_frame_extraction: bool = Field(False, description="Reuse frames already on disk")
    frame_file_format: str = Field("jpg", description="Image encoding for individual frames")
    sheet_file_format: str = Field("jpg", description="Image encoding for tilesheets")
    background_color: tuple[int, int, int] = Field(
        (255, 255, 255), description="Opaque RGB fill for unused cells"
    )
    max_workers: int = Field(4, gt=0, description="Worker pool size for decoding and persisting")
    engine: Literal["opencv", "ffmpeg"] = Field("opencv", description="Probe/extraction backend")
    ffmpeg_path: str = Field("ffmpeg", description="ffmpeg binary (engine=ffmpeg)")
    ffprobe_path: str = Field("ffprobe", description="ffprobe binary (engine=ffmpeg)")
    atomic_output: bool = Field(
        False, description="Stage tilesheets and publish only when every sheet succeeded"
    )
    require_uniform_height: bool = Field(
        True, description="Reject frame sets whose heights differ"
    )

    @field_validator("frame_file_format", "sheet_file_format")
    @classmethod
    def _normalise_format(cls, value: str) -> str:
        value = value.strip().lstrip(".").lower()
        if not value:
            raise ValueError("file format must not be empty")
        return value

    @field_validator("background_color")
    @classmethod
    def _check_color(cls, value: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(c < 0 or c > 255 for c in value):
            raise ValueError(f"background_color channels must be 0-255, got {value}")
        return value

    def resolve_output_dir(self, video_path: Path) -> Path:
        """Output root for a given video."""
        if self.output_dir is not None:
            return Path(self.output_dir)
        return video_path.parent / f"{video_path.stem}.trickplay"

    def frames_dir(self, video_path: Path) -> Path:
        return self.resolve_output_dir(video_path) / "frames"

    def tilesheet_dir(self, video_path: Path) -> Path:
        name = f"{self.frame_width} - {self.sheet_columns}x{self.sheet_rows}"
        return self.resolve_output_dir(video_path) / name


class VideoAsset(BaseModel):
    """Source video and its probed duration."""

    source_path: Path
    duration_seconds: float


class FrameRecord(BaseModel):
    """One extracted frame on disk.

    ``index`` is the frame's position in temporal order (0-based, contiguous);
    ``file_number`` is the integer parsed from its filename.
    """

    index: int = Field(..., ge=0)
    file_number: int
    file_path: Path
    pixel_width: int | None = None
    pixel_height: int | None = None


class Placement(BaseModel):
    """Where one frame lands: sheet and top-left pixel offset."""

    model_config = ConfigDict(frozen=True)

    frame_index: int
    sheet_index: int
    x_pixel: int
    y_pixel: int


class TilesheetSpec(BaseModel):
    """Geometry of one tilesheet and the placements assigned to it."""

    sheet_index: int
    width_pixels: int
    height_pixels: int
    placements: list[Placement] = Field(default_factory=list)


class GridLayout(BaseModel):
    """Packing result: every frame's placement, grouped by sheet."""

    frame_count: int
    sheet_columns: int
    sheet_rows: int
    frame_width: int
    frame_height: int
    total_rows: int
    sheet_count: int
    sheets: list[TilesheetSpec] = Field(default_factory=list)

    @property
    def placements(self) -> list[Placement]:
        return [p for sheet in self.sheets for p in sheet.placements]
