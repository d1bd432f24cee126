"""I/O contracts for Step 03: Video to Frames extraction."""

from pathlib import Path
from pydantic import BaseModel, Field


class ExtractFramesInput(BaseModel):
    video_path: Path = Field(..., description="Path to input video file")
    timestamps: list[float] = Field(default_factory=list, description="Offsets to sample (s)")
    frames_dir: Path = Field(..., description="Directory to write frames into")


class ExtractFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory containing extracted frames")
    frame_count: int = Field(..., description="Number of frames extracted")
    frame_list: list[str] = Field(default_factory=list, description="List of frame filenames")
