"""I/O contracts for Step 06: Composite tilesheets."""

from pathlib import Path

from pydantic import BaseModel, Field

from trickplay.core.contracts import FrameRecord, GridLayout


class CompositeInput(BaseModel):
    frames: list[FrameRecord] = Field(default_factory=list, description="Measured frames in order")
    layout: GridLayout = Field(..., description="Placements from the pack step")
    tilesheet_dir: Path = Field(..., description="Directory receiving {sheet_index}.{format}")


class CompositeOutput(BaseModel):
    tilesheet_dir: Path = Field(..., description="Directory holding the written sheets")
    sheet_paths: list[Path] = Field(default_factory=list, description="Written sheets by index")
