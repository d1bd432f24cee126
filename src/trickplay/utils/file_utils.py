"""Filesystem helpers shared by the extraction and compositing steps."""

from __future__ import annotations

from pathlib import Path


def remove_files_with_suffix(directory: Path, file_format: str) -> int:
    """Delete ``*.{file_format}`` files (case-insensitive) directly under ``directory``.

    Subdirectories and other files are left alone. Returns the number removed;
    a missing directory counts as nothing to remove.
    """
    if not directory.is_dir():
        return 0
    suffix = f".{file_format.lower()}"
    removed = 0
    for path in directory.iterdir():
        if path.is_file() and path.suffix.lower() == suffix:
            path.unlink()
            removed += 1
    return removed
