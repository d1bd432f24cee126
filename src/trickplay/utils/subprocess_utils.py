"""Subprocess runner for the external ffmpeg/ffprobe binaries."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int = 600,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command, logging its tail output.

    Raises ``subprocess.CalledProcessError`` on a non-zero exit when ``check``
    is set, ``subprocess.TimeoutExpired`` after ``timeout`` seconds and
    ``FileNotFoundError`` when the binary is missing.
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )

    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd[0], result.stdout, result.stderr
        )
    return result
