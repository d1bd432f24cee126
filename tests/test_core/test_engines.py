"""Tests for the OpenCV and ffmpeg collaborator engines."""

import json
import subprocess
from pathlib import Path

import numpy as np
import pytest

from trickplay.core.contracts import TrickplayConfig
from trickplay.core.engines import (
    FFmpegFrameExtractor,
    FFprobeProber,
    FrameExtractor,
    ImageEngine,
    MediaProber,
    OpenCVFrameExtractor,
    OpenCVImageEngine,
    OpenCVProber,
    build_engine_context,
)


class TestOpenCVImageEngine:
    def test_canvas_is_filled_with_background(self):
        engine = OpenCVImageEngine()
        canvas = engine.new_canvas(40, 20, (255, 128, 0))
        assert canvas.shape == (20, 40, 3)
        # BGR storage
        assert tuple(canvas[0, 0]) == (0, 128, 255)
        assert tuple(canvas[19, 39]) == (0, 128, 255)

    def test_blit_writes_only_target_region(self):
        engine = OpenCVImageEngine()
        canvas = engine.new_canvas(40, 20, (255, 255, 255))
        tile = np.full((10, 20, 3), 7, dtype=np.uint8)
        engine.blit(canvas, tile, 20, 10)
        assert (canvas[10:20, 20:40] == 7).all()
        assert (canvas[0:10, :] == 255).all()
        assert (canvas[:, 0:20] == 255).all()

    def test_blit_out_of_bounds(self):
        engine = OpenCVImageEngine()
        canvas = engine.new_canvas(40, 20, (0, 0, 0))
        with pytest.raises(ValueError):
            engine.blit(canvas, np.zeros((10, 20, 3), dtype=np.uint8), 30, 0)

    def test_encode_decode_png(self, tmp_path: Path):
        engine = OpenCVImageEngine()
        canvas = engine.new_canvas(16, 8, (10, 20, 30))
        path = tmp_path / "sheet.png"
        engine.encode(canvas, path, "png")
        decoded = engine.decode(path)
        np.testing.assert_array_equal(decoded, canvas)
        assert engine.measure(path) == (16, 8)

    def test_measure_reads_header_without_decoding(self, monkeypatch, tmp_path: Path):
        engine = OpenCVImageEngine()
        path = tmp_path / "0.jpg"
        engine.encode(engine.new_canvas(48, 27, (0, 0, 0)), path, "jpg")

        def no_decode(_path):
            raise AssertionError("measure must not decode pixels")

        monkeypatch.setattr(engine, "decode", no_decode)
        assert engine.measure(path) == (48, 27)

    def test_measure_rejects_non_image(self, tmp_path: Path):
        bogus = tmp_path / "0.png"
        bogus.write_bytes(b"not an image")
        with pytest.raises(OSError):
            OpenCVImageEngine().measure(bogus)

    def test_decode_missing(self, tmp_path: Path):
        with pytest.raises(OSError):
            OpenCVImageEngine().decode(tmp_path / "nope.png")

    def test_protocols(self):
        assert isinstance(OpenCVImageEngine(), ImageEngine)
        assert isinstance(OpenCVProber(), MediaProber)
        assert isinstance(OpenCVFrameExtractor(), FrameExtractor)


class TestOpenCVVideo:
    def test_probe_unreadable(self, tmp_path: Path):
        bogus = tmp_path / "bogus.mp4"
        bogus.write_bytes(b"not a video")
        with pytest.raises(RuntimeError):
            OpenCVProber().probe(bogus)


class TestFFmpegBackend:
    def test_ffprobe_duration(self, monkeypatch, tmp_path: Path):
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            return subprocess.CompletedProcess(
                cmd, 0, stdout=json.dumps({"format": {"duration": "125.5"}}), stderr=""
            )

        monkeypatch.setattr("trickplay.utils.subprocess_utils.run_command", fake_run)
        assert FFprobeProber("my-ffprobe").probe(tmp_path / "v.mp4") == 125.5
        assert seen["cmd"][0] == "my-ffprobe"
        assert "-show_format" in seen["cmd"]

    def test_ffprobe_without_duration(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(
            "trickplay.utils.subprocess_utils.run_command",
            lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="{}", stderr=""),
        )
        with pytest.raises(RuntimeError):
            FFprobeProber().probe(tmp_path / "v.mp4")

    def test_ffmpeg_extract_names_frames_by_index(self, monkeypatch, tmp_path: Path):
        commands = []

        def fake_run(cmd, **kwargs):
            commands.append(cmd)
            Path(cmd[-1]).write_bytes(b"jpg")
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr("trickplay.utils.subprocess_utils.run_command", fake_run)
        produced = list(
            FFmpegFrameExtractor().extract(tmp_path / "v.mp4", [0.0, 10.0], 320, tmp_path, "jpg")
        )
        assert [p.name for p in produced] == ["0.jpg", "1.jpg"]
        assert commands[1][commands[1].index("-ss") + 1] == "10.000"
        assert "scale=320:-1" in commands[0]

    def test_ffmpeg_failure_propagates(self, monkeypatch, tmp_path: Path):
        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd[0])

        monkeypatch.setattr("trickplay.utils.subprocess_utils.run_command", fake_run)
        with pytest.raises(subprocess.CalledProcessError):
            list(FFmpegFrameExtractor().extract(tmp_path / "v.mp4", [0.0], 320, tmp_path, "jpg"))


class TestBuildEngineContext:
    def test_opencv_default(self):
        ctx = build_engine_context(TrickplayConfig())
        assert isinstance(ctx.prober, OpenCVProber)
        assert isinstance(ctx.extractor, OpenCVFrameExtractor)
        assert isinstance(ctx.image_engine, OpenCVImageEngine)

    def test_ffmpeg(self):
        ctx = build_engine_context(TrickplayConfig(engine="ffmpeg", ffprobe_path="/opt/ffprobe"))
        assert isinstance(ctx.prober, FFprobeProber)
        assert ctx.prober.ffprobe_path == "/opt/ffprobe"
        assert isinstance(ctx.extractor, FFmpegFrameExtractor)

    def test_contexts_do_not_share_tokens(self):
        a = build_engine_context(TrickplayConfig())
        b = build_engine_context(TrickplayConfig())
        a.cancel_token.cancel()
        assert b.cancel_token.cancelled is False
