"""I/O contracts for Step 01: Probe video metadata."""

from pathlib import Path

from pydantic import BaseModel, Field

from trickplay.core.contracts import VideoAsset


class ProbeInput(BaseModel):
    video_path: Path = Field(..., description="Path to the source video")


class ProbeOutput(BaseModel):
    video: VideoAsset = Field(..., description="Source path and probed duration")
