"""Cooperative cancellation for pipeline runs."""

import threading
from typing import Optional

from codeforge.application.services.exceptions import PipelineCancelledError
from codeforge.domain.model_types import PipelineStage


class CancellationToken:
    """A thread-safe flag a caller sets to abort a running pipeline.

    Stages poll ``raise_if_cancelled`` between units of work, and the provider
    gateway waits on the token instead of sleeping so a cancel interrupts
    backoff and in-flight provider waits immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds. Returns True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self, stage: Optional[PipelineStage] = None) -> None:
        if self._event.is_set():
            raise PipelineCancelledError(self.reason or "cancelled", stage=stage)
