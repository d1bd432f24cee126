"""I/O contracts for Step 05: Pack frames onto the tilesheet grid."""

from pydantic import BaseModel, Field

from trickplay.core.contracts import FrameRecord, GridLayout


class PackGridInput(BaseModel):
    frames: list[FrameRecord] = Field(default_factory=list, description="Frames in temporal order")


class PackGridOutput(BaseModel):
    frames: list[FrameRecord] = Field(default_factory=list, description="Frames with measured sizes")
    layout: GridLayout = Field(..., description="Sheet geometry and per-frame placements")
