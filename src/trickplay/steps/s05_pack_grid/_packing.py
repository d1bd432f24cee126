"""Grid arithmetic mapping an ordered frame sequence onto tilesheets.

Frames fill rows left to right; ``sheet_rows`` consecutive rows make one
sheet. Column and row counts are taken from the arguments only, so row
partitioning, sheet index and pixel offset can never disagree.
"""

from __future__ import annotations

import math

from trickplay.core.contracts import GridLayout, Placement, TilesheetSpec
from trickplay.core.errors import PackingError


def _check_grid(sheet_columns: int, sheet_rows: int) -> None:
    if sheet_columns <= 0 or sheet_rows <= 0:
        raise PackingError(
            f"Sheet grid must be at least 1x1, got {sheet_columns}x{sheet_rows}"
        )


def sheet_count_for(frame_count: int, sheet_columns: int, sheet_rows: int) -> int:
    """ceil(ceil(frame_count / columns) / rows)."""
    _check_grid(sheet_columns, sheet_rows)
    if frame_count < 0:
        raise PackingError(f"frame_count must be >= 0, got {frame_count}")
    total_rows = math.ceil(frame_count / sheet_columns)
    return math.ceil(total_rows / sheet_rows)


def sheet_frame_counts(frame_count: int, sheet_columns: int, sheet_rows: int) -> list[int]:
    """Number of frames landing on each sheet."""
    per_sheet = sheet_columns * sheet_rows
    sheets = sheet_count_for(frame_count, sheet_columns, sheet_rows)
    return [min(per_sheet, frame_count - i * per_sheet) for i in range(sheets)]


def place_frame(
    frame_index: int,
    sheet_columns: int,
    sheet_rows: int,
    frame_width: int,
    frame_height: int,
) -> Placement:
    row = frame_index // sheet_columns
    column = frame_index % sheet_columns
    sheet_index = row // sheet_rows
    row_within_sheet = row - sheet_index * sheet_rows
    return Placement(
        frame_index=frame_index,
        sheet_index=sheet_index,
        x_pixel=column * frame_width,
        y_pixel=row_within_sheet * frame_height,
    )


def pack_grid(
    frame_count: int,
    sheet_columns: int,
    sheet_rows: int,
    frame_width: int,
    frame_height: int,
) -> GridLayout:
    """Assign every frame index in ``0..frame_count-1`` a sheet and pixel offset."""
    sheet_count = sheet_count_for(frame_count, sheet_columns, sheet_rows)
    if frame_count > 0 and (frame_width <= 0 or frame_height <= 0):
        raise PackingError(f"Frame size must be positive, got {frame_width}x{frame_height}")

    sheets = [
        TilesheetSpec(
            sheet_index=i,
            width_pixels=frame_width * sheet_columns,
            height_pixels=frame_height * sheet_rows,
        )
        for i in range(sheet_count)
    ]
    for frame_index in range(frame_count):
        placement = place_frame(frame_index, sheet_columns, sheet_rows, frame_width, frame_height)
        sheets[placement.sheet_index].placements.append(placement)

    return GridLayout(
        frame_count=frame_count,
        sheet_columns=sheet_columns,
        sheet_rows=sheet_rows,
        frame_width=frame_width,
        frame_height=frame_height,
        total_rows=math.ceil(frame_count / sheet_columns),
        sheet_count=sheet_count,
        sheets=sheets,
    )
