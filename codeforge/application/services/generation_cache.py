"""Single-flight cache of pipeline results keyed by request fingerprint."""

import hashlib
import json
import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Dict, Optional

from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import PipelineCancelledError
from codeforge.domain.models import GenerationRequest, PipelineResult

logger = logging.getLogger(__name__)


def request_fingerprint(request: GenerationRequest) -> str:
    """SHA-256 of the request's canonical JSON form."""
    canonical = json.dumps(
        request.to_dict(), sort_keys=True, separators=(",", ":"), default=str
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class GenerationCache:
    """Shares one in-flight generation per fingerprint between callers.

    The first caller for a fingerprint runs the generation; concurrent callers
    with the same fingerprint wait for it and receive the same result or
    exception. Successful results are kept for later callers. Failures are
    not cached, and a cancelled leader does not cancel its waiters: they
    retry and one of them becomes the new leader.
    """

    def __init__(self, max_entries: int = 256):
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}
        self._results: Dict[str, PipelineResult] = {}

    def get(self, fingerprint: str) -> Optional[PipelineResult]:
        with self._lock:
            return self._results.get(fingerprint)

    def get_or_compute(
        self,
        fingerprint: str,
        compute: Callable[[], PipelineResult],
        cancel_token: Optional[CancellationToken] = None,
    ) -> PipelineResult:
        """Return a cached result or run ``compute`` exactly once per fingerprint.

        Args:
            fingerprint: Request fingerprint
            compute: Runs the pipeline; called at most once concurrently per key
            cancel_token: Stops a waiting caller without affecting the leader

        Returns:
            The cached or freshly computed result
        """
        while True:
            with self._lock:
                cached = self._results.get(fingerprint)
                if cached is not None:
                    logger.info(f"Cache hit for {fingerprint[:12]}")
                    return cached
                pending = self._pending.get(fingerprint)
                if pending is None:
                    pending = Future()
                    self._pending[fingerprint] = pending
                    leader = True
                else:
                    leader = False

            if leader:
                return self._lead(fingerprint, pending, compute)

            logger.debug(f"Waiting on in-flight generation {fingerprint[:12]}")
            try:
                return self._wait(pending, cancel_token)
            except PipelineCancelledError:
                if cancel_token is not None and cancel_token.cancelled:
                    raise
                continue

    @staticmethod
    def _wait(pending: Future, cancel_token: Optional[CancellationToken]) -> PipelineResult:
        if cancel_token is None:
            return pending.result()
        while True:
            try:
                return pending.result(timeout=0.05)
            except FutureTimeoutError:
                if pending.done():
                    raise
                cancel_token.raise_if_cancelled()

    def _lead(
        self,
        fingerprint: str,
        pending: Future,
        compute: Callable[[], PipelineResult],
    ) -> PipelineResult:
        try:
            result = compute()
        except BaseException as e:
            with self._lock:
                self._pending.pop(fingerprint, None)
            pending.set_exception(e)
            raise

        with self._lock:
            self._pending.pop(fingerprint, None)
            if len(self._results) >= self.max_entries:
                # drop the oldest entry
                self._results.pop(next(iter(self._results)))
            self._results[fingerprint] = result
        pending.set_result(result)
        return result
