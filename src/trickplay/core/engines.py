"""Collaborator engines: media probing, frame extraction and image compositing.

The pipeline never touches a codec directly. Each run gets an ``EngineContext``
holding the three engines it calls into, so two runs in one process can use
different backends without sharing state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Protocol, Sequence, runtime_checkable

import numpy as np

from .cancellation import CancellationToken
from .contracts import PipelineStage, TrickplayConfig

logger = logging.getLogger(__name__)


# ── Interfaces ───────────────────────────────────────────────────────

@runtime_checkable
class MediaProber(Protocol):
    def probe(self, video_path: Path) -> float:
        """Return the video duration in seconds."""
        ...


@runtime_checkable
class FrameExtractor(Protocol):
    def extract(
        self,
        video_path: Path,
        timestamps: Sequence[float],
        target_width: int,
        output_dir: Path,
        frame_format: str,
        cancel_token: CancellationToken | None = None,
    ) -> Iterator[Path]:
        """Write ``{index}.{frame_format}`` per timestamp, yielding each path as produced."""
        ...


@runtime_checkable
class ImageEngine(Protocol):
    def decode(self, path: Path) -> Any: ...

    def dimensions(self, image: Any) -> tuple[int, int]:
        """(width, height) of a decoded image."""
        ...

    def measure(self, path: Path) -> tuple[int, int]: ...

    def new_canvas(self, width: int, height: int, background: tuple[int, int, int]) -> Any: ...

    def blit(self, canvas: Any, image: Any, x: int, y: int) -> None: ...

    def encode(self, canvas: Any, path: Path, file_format: str) -> None: ...


# ── OpenCV backend ───────────────────────────────────────────────────

class OpenCVProber:
    """Duration from the container's frame count and frame rate."""

    def probe(self, video_path: Path) -> float:
        import cv2

        cap = cv2.VideoCapture(str(video_path))
        try:
            if not cap.isOpened():
                raise RuntimeError(f"OpenCV cannot open {video_path}")
            fps = cap.get(cv2.CAP_PROP_FPS)
            total_frames = cap.get(cv2.CAP_PROP_FRAME_COUNT)
        finally:
            cap.release()

        if fps <= 0 or total_frames < 0:
            raise RuntimeError(f"No frame rate/count reported (fps={fps}, frames={total_frames})")
        return float(total_frames) / float(fps)


class OpenCVFrameExtractor:
    """Seek-and-grab extraction, resized to the target width keeping aspect ratio."""

    def extract(
        self,
        video_path: Path,
        timestamps: Sequence[float],
        target_width: int,
        output_dir: Path,
        frame_format: str,
        cancel_token: CancellationToken | None = None,
    ) -> Iterator[Path]:
        import cv2

        cap = cv2.VideoCapture(str(video_path))
        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"OpenCV cannot open {video_path}")
        try:
            for index, ts in enumerate(timestamps):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled(PipelineStage.EXTRACTING, index)
                cap.set(cv2.CAP_PROP_POS_MSEC, ts * 1000.0)
                ret, frame = cap.read()
                if not ret or frame is None:
                    raise RuntimeError(f"No frame decoded at {ts:.3f}s")
                h, w = frame.shape[:2]
                new_h = max(1, int(h * target_width / w))
                frame = cv2.resize(frame, (target_width, new_h), interpolation=cv2.INTER_AREA)
                out_path = output_dir / f"{index}.{frame_format}"
                if not cv2.imwrite(str(out_path), frame):
                    raise OSError(f"Could not write {out_path}")
                yield out_path
        finally:
            cap.release()


class OpenCVImageEngine:
    """Images are BGR ``uint8`` numpy arrays; blits are slice assignments."""

    def decode(self, path: Path) -> np.ndarray:
        import cv2

        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise OSError(f"Cannot decode image {path}")
        return image

    def dimensions(self, image: np.ndarray) -> tuple[int, int]:
        h, w = image.shape[:2]
        return int(w), int(h)

    def measure(self, path: Path) -> tuple[int, int]:
        """Read width and height from the file header without decoding pixels."""
        from PIL import Image

        with Image.open(path) as img:
            width, height = img.size
        return int(width), int(height)

    def new_canvas(self, width: int, height: int, background: tuple[int, int, int]) -> np.ndarray:
        r, g, b = background
        canvas = np.empty((height, width, 3), dtype=np.uint8)
        canvas[:] = (b, g, r)
        return canvas

    def blit(self, canvas: np.ndarray, image: np.ndarray, x: int, y: int) -> None:
        h, w = image.shape[:2]
        canvas_h, canvas_w = canvas.shape[:2]
        if x < 0 or y < 0 or x + w > canvas_w or y + h > canvas_h:
            raise ValueError(
                f"{w}x{h} image at ({x}, {y}) exceeds {canvas_w}x{canvas_h} canvas"
            )
        canvas[y:y + h, x:x + w] = image

    def encode(self, canvas: np.ndarray, path: Path, file_format: str) -> None:
        import cv2

        ok, buffer = cv2.imencode(f".{file_format}", canvas)
        if not ok:
            raise OSError(f"OpenCV cannot encode {file_format!r}")
        path.write_bytes(buffer.tobytes())


# ── ffmpeg backend ───────────────────────────────────────────────────

class FFprobeProber:
    def __init__(self, ffprobe_path: str = "ffprobe", timeout: int = 60):
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def probe(self, video_path: Path) -> float:
        from trickplay.utils.subprocess_utils import run_command

        result = run_command(
            [
                self.ffprobe_path,
                "-v", "error",
                "-print_format", "json",
                "-show_format",
                str(video_path),
            ],
            timeout=self.timeout,
        )
        data = json.loads(result.stdout or "{}")
        duration = data.get("format", {}).get("duration")
        if duration is None:
            raise RuntimeError(f"ffprobe reported no duration for {video_path}")
        return float(duration)


class FFmpegFrameExtractor:
    """One fast-seek ffmpeg invocation per timestamp."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: int = 120):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    def extract(
        self,
        video_path: Path,
        timestamps: Sequence[float],
        target_width: int,
        output_dir: Path,
        frame_format: str,
        cancel_token: CancellationToken | None = None,
    ) -> Iterator[Path]:
        from trickplay.utils.subprocess_utils import run_command

        for index, ts in enumerate(timestamps):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(PipelineStage.EXTRACTING, index)
            out_path = output_dir / f"{index}.{frame_format}"
            run_command(
                [
                    self.ffmpeg_path,
                    "-y",
                    "-v", "error",
                    "-ss", f"{ts:.3f}",
                    "-i", str(video_path),
                    "-frames:v", "1",
                    "-vf", f"scale={target_width}:-1",
                    str(out_path),
                ],
                timeout=self.timeout,
            )
            if not out_path.exists():
                raise RuntimeError(f"ffmpeg produced no frame at {ts:.3f}s")
            yield out_path


# ── Context ──────────────────────────────────────────────────────────

@dataclass
class EngineContext:
    """Engines and cancellation token injected into every step of one run."""

    prober: MediaProber
    extractor: FrameExtractor
    image_engine: ImageEngine
    cancel_token: CancellationToken = field(default_factory=CancellationToken)


def build_engine_context(
    config: TrickplayConfig,
    cancel_token: CancellationToken | None = None,
) -> EngineContext:
    """Build the engines selected by ``config.engine``."""
    token = cancel_token or CancellationToken()
    if config.engine == "ffmpeg":
        prober: MediaProber = FFprobeProber(config.ffprobe_path)
        extractor: FrameExtractor = FFmpegFrameExtractor(config.ffmpeg_path)
    else:
        prober = OpenCVProber()
        extractor = OpenCVFrameExtractor()
    logger.debug(f"Engine backend: {config.engine}")
    return EngineContext(
        prober=prober,
        extractor=extractor,
        image_engine=OpenCVImageEngine(),
        cancel_token=token,
    )
