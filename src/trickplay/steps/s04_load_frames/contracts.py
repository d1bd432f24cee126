"""I/O contracts for Step 04: Load the frame set."""

from pathlib import Path

from pydantic import BaseModel, Field

from trickplay.core.contracts import FrameRecord


class LoadFramesInput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of extracted frames")
    expected_count: int | None = Field(None, description="Number of scheduled frames, if known")


class LoadFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of extracted frames")
    frames: list[FrameRecord] = Field(default_factory=list, description="Frames in temporal order")
