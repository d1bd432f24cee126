"""Fixtures for E2E pipeline tests."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest


def create_synthetic_video(
    output_dir: Path,
    num_frames: int = 90,
    resolution: tuple[int, int] = (160, 120),
    fps: float = 30.0,
) -> Path:
    """
    Create a synthetic test video whose brightness steps up once per second.

    Args:
        output_dir: Directory to save the video
        num_frames: Number of frames to generate
        resolution: Video resolution as (width, height)
        fps: Frames per second

    Returns:
        Path to the created video file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    video_path = output_dir / "synthetic_test_video.mp4"

    width, height = resolution
    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(str(video_path), fourcc, fps, (width, height))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write mp4v video")

    for i in range(num_frames):
        level = 40 + 60 * int(i // fps)
        frame = np.full((height, width, 3), level, dtype=np.uint8)
        cv2.putText(frame, f"F:{i:03d}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1)
        writer.write(frame)

    writer.release()
    return video_path


@pytest.fixture
def synthetic_video(tmp_path: Path) -> Path:
    """A 3 second, 160x120, 30fps video."""
    return create_synthetic_video(tmp_path / "media")
