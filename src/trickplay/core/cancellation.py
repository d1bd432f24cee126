"""Cooperative cancellation shared by extraction and compositing."""

from __future__ import annotations

import threading

from .contracts import PipelineStage
from .errors import PipelineCancelled


class CancellationToken:
    """Thread-safe flag a caller sets to abort a running batch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: PipelineStage, index: int | None = None) -> None:
        if self._event.is_set():
            raise PipelineCancelled("Run cancelled by caller", stage=stage, index=index)
