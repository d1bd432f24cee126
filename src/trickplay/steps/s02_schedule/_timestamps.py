"""Sample-offset computation.

Precedence: a non-empty explicit list is used as given, else an explicit
frame count spreads samples evenly over the duration, else samples fall every
``seconds_between_frames`` from zero.
"""

from __future__ import annotations

import math
from typing import Sequence

from trickplay.core.errors import ScheduleError


def _check_offset(value: float, label: str) -> None:
    if value is None or isinstance(value, bool) or not math.isfinite(value) or value < 0:
        raise ScheduleError(f"{label} must be a finite non-negative number, got {value!r}")


def interval_frame_count(duration_seconds: float, seconds_between_frames: float) -> int:
    """floor(duration / interval)."""
    _check_offset(duration_seconds, "duration_seconds")
    if (
        seconds_between_frames is None
        or not math.isfinite(seconds_between_frames)
        or seconds_between_frames <= 0
    ):
        raise ScheduleError(
            f"seconds_between_frames must be a finite positive number, got {seconds_between_frames!r}"
        )
    return math.floor(duration_seconds / seconds_between_frames)


def compute_timestamps(
    duration_seconds: float,
    seconds_between_frames: float,
    frame_timestamps: Sequence[float] | None = None,
    frame_count: int | None = None,
) -> tuple[list[float], str]:
    """Return ``(timestamps, source)`` where source is explicit|count|interval."""
    _check_offset(duration_seconds, "duration_seconds")

    if frame_timestamps:
        for i, ts in enumerate(frame_timestamps):
            _check_offset(ts, f"frame_timestamps[{i}]")
        return [float(ts) for ts in frame_timestamps], "explicit"

    if frame_count is not None:
        if frame_count < 0:
            raise ScheduleError(f"frame_count must be >= 0, got {frame_count}")
        if frame_count == 0:
            return [], "count"
        step = duration_seconds / frame_count
        return [i * step for i in range(frame_count)], "count"

    count = interval_frame_count(duration_seconds, seconds_between_frames)
    return [i * seconds_between_frames for i in range(count)], "interval"
