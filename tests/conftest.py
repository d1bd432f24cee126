"""Shared pytest fixtures for trickplay pipeline tests."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from trickplay.core.cancellation import CancellationToken
from trickplay.core.contracts import PipelineStage
from trickplay.core.engines import EngineContext, OpenCVImageEngine


def shade(index: int) -> int:
    """Distinct grey level per frame index (never the white background)."""
    return (index * 20) % 240


def write_solid_frame(path: Path, width: int, height: int, value: int) -> Path:
    cv2.imwrite(str(path), np.full((height, width, 3), value, dtype=np.uint8))
    return path


class FakeProber:
    def __init__(self, duration: float | None = 125.0, error: Exception | None = None):
        self.duration = duration
        self.error = error
        self.calls: list[Path] = []

    def probe(self, video_path: Path) -> float:
        self.calls.append(video_path)
        if self.error is not None:
            raise self.error
        return self.duration


class FakeExtractor:
    """Writes solid grey frames instead of decoding video."""

    def __init__(self, height: int = 18, fail_at: int | None = None, stop_at: int | None = None):
        self.height = height
        self.fail_at = fail_at
        self.stop_at = stop_at
        self.calls: list[list[float]] = []

    def extract(self, video_path, timestamps, target_width, output_dir, frame_format, cancel_token=None):
        self.calls.append(list(timestamps))
        for index, _ts in enumerate(timestamps):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(PipelineStage.EXTRACTING, index)
            if index == self.fail_at:
                raise RuntimeError("decoder exploded")
            if index == self.stop_at:
                return
            yield write_solid_frame(
                output_dir / f"{index}.{frame_format}", target_width, self.height, shade(index)
            )


class FaultyImageEngine(OpenCVImageEngine):
    """OpenCV engine with injectable decode/encode failures and cancellation."""

    def __init__(
        self,
        decode_fail: set[int] | None = None,
        encode_fail: set[int] | None = None,
        cancel_token: CancellationToken | None = None,
        cancel_after_decodes: int | None = None,
    ):
        self.decode_fail = decode_fail or set()
        self.encode_fail = encode_fail or set()
        self.cancel_token = cancel_token
        self.cancel_after_decodes = cancel_after_decodes
        self.decodes = 0
        self.encoded: list[Path] = []

    def decode(self, path: Path) -> np.ndarray:
        if int(path.stem) in self.decode_fail:
            raise OSError(f"corrupt frame {path.name}")
        image = super().decode(path)
        self.decodes += 1
        if self.cancel_after_decodes is not None and self.decodes >= self.cancel_after_decodes:
            self.cancel_token.cancel()
        return image

    def encode(self, canvas: np.ndarray, path: Path, file_format: str) -> None:
        if int(path.stem) in self.encode_fail:
            raise OSError("disk full")
        super().encode(canvas, path, file_format)
        self.encoded.append(path)


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    """Placeholder video; probing and extraction are faked."""
    path = tmp_path / "movie.mp4"
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def make_context():
    """Build an EngineContext from fakes.

    Keyword arguments: duration, probe_error, frame_height, extract_fail_at,
    extract_stop_at, decode_fail, encode_fail, cancel_after_decodes.
    """

    def _make(
        duration: float | None = 125.0,
        probe_error: Exception | None = None,
        frame_height: int = 18,
        extract_fail_at: int | None = None,
        extract_stop_at: int | None = None,
        decode_fail: set[int] | None = None,
        encode_fail: set[int] | None = None,
        cancel_after_decodes: int | None = None,
    ) -> EngineContext:
        token = CancellationToken()
        return EngineContext(
            prober=FakeProber(duration, probe_error),
            extractor=FakeExtractor(frame_height, extract_fail_at, extract_stop_at),
            image_engine=FaultyImageEngine(decode_fail, encode_fail, token, cancel_after_decodes),
            cancel_token=token,
        )

    return _make


@pytest.fixture
def frame_writer():
    """Write ``count`` solid frames named 0..count-1 into a directory."""

    def _write(directory: Path, count: int, width: int = 32, height: int = 18, fmt: str = "png"):
        directory.mkdir(parents=True, exist_ok=True)
        return [
            write_solid_frame(directory / f"{i}.{fmt}", width, height, shade(i))
            for i in range(count)
        ]

    return _write
