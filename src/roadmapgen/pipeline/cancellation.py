"""Cancellation token passed through the pipeline stages."""

from __future__ import annotations

import threading

from roadmapgen.pipeline.exceptions import PipelineCancelledError


class CancellationToken:
    """Thread-safe flag a signal handler can set to stop a run.

    Stages check it at their boundaries; a stage already running finishes
    first.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise PipelineCancelledError if cancellation was requested.

        Args:
            stage: Name of the stage about to start, for the error message.
        """
        if self._event.is_set():
            raise PipelineCancelledError(f"Cancelled before {stage}: {self.reason}")
