"""Discover frame files on disk and recover their temporal order."""

from __future__ import annotations

from pathlib import Path

from trickplay.core.contracts import FrameRecord
from trickplay.core.errors import DirectoryMissing, FilenameParseError


def parse_frame_number(path: Path) -> int:
    """Integer index encoded in a frame filename's stem ("12.jpg" -> 12)."""
    stem = path.stem
    if not (stem.isascii() and stem.isdigit()):
        raise FilenameParseError(f"Frame filename {path.name!r} is not '<index>{path.suffix}'")
    return int(stem)


def scan_frame_directory(frames_dir: Path, frame_format: str) -> list[FrameRecord]:
    """Frame records for every ``*.{frame_format}`` file, sorted by numeric index.

    Extension matching is case-insensitive. Any matching file whose stem is not
    an integer, or two files that parse to the same integer, abort the scan.
    """
    if not frames_dir.is_dir():
        raise DirectoryMissing(f"Frames directory not found: {frames_dir}")

    suffix = f".{frame_format.lower()}"
    numbered: dict[int, Path] = {}
    for path in frames_dir.iterdir():
        if not path.is_file() or path.suffix.lower() != suffix:
            continue
        number = parse_frame_number(path)
        if number in numbered:
            raise FilenameParseError(
                f"{path.name!r} and {numbered[number].name!r} share frame index {number}",
                index=number,
            )
        numbered[number] = path

    return [
        FrameRecord(index=position, file_number=number, file_path=numbered[number])
        for position, number in enumerate(sorted(numbered))
    ]
