"""I/O contracts for Step 02: Schedule sample timestamps."""

from typing import Literal

from pydantic import BaseModel, Field


class ScheduleInput(BaseModel):
    duration_seconds: float = Field(..., description="Video duration in seconds")


class ScheduleOutput(BaseModel):
    timestamps: list[float] = Field(default_factory=list, description="Ordered sample offsets (s)")
    frame_count: int = Field(..., description="Number of scheduled samples")
    source: Literal["explicit", "count", "interval"] = Field(
        ..., description="Which rule produced the timestamps"
    )
