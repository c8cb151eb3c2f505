"""Provider gateway: timeout, bounded retries and cancellation around a client."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from codeforge.application.interfaces.illm_client import ILLMClient
from codeforge.application.interfaces.iprovider_gateway import (
    IProviderGateway,
    ProviderResponse,
)
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import (
    PipelineCancelledError,
    ProviderUnavailableError,
)
from codeforge.domain.model_types import PipelineStage

logger = logging.getLogger(__name__)

# How often a waiting call re-checks its cancellation token
POLL_INTERVAL_SECONDS = 0.05


class ProviderCallTimeout(Exception):
    pass


class LLMProviderGateway(IProviderGateway):
    """Runs ``ILLMClient.complete`` with a hard timeout and optional retries.

    Each attempt runs on the gateway's worker pool so the caller can stop
    waiting when the deadline passes or the run is cancelled. A timed-out
    SDK call cannot be interrupted; its thread finishes in the background
    and its result is discarded.
    """

    def __init__(
        self,
        client: ILLMClient,
        timeout_seconds: float = 30.0,
        max_retries: int = 0,
        backoff_seconds: float = 0.5,
        max_workers: int = 8,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="codeforge-provider"
        )

    def generate(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        cancel_token: Optional[CancellationToken] = None,
        stage: PipelineStage = PipelineStage.GENERATE,
    ) -> ProviderResponse:
        started = time.perf_counter()
        attempts = self.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(attempts):
            self._check_cancelled(cancel_token, stage)
            future = self._executor.submit(
                self.client.complete,
                prompt,
                max_tokens,
                temperature,
                self.timeout_seconds,
            )
            try:
                text = self._await(future, cancel_token, stage)
            except PipelineCancelledError:
                future.cancel()
                raise
            except ProviderCallTimeout as e:
                future.cancel()
                last_error = e
                logger.warning(
                    f"Provider call attempt {attempt + 1}/{attempts} timed out "
                    f"after {self.timeout_seconds}s"
                )
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Provider call attempt {attempt + 1}/{attempts} failed: {e}"
                )
            else:
                return ProviderResponse(
                    text=text or "",
                    model=self.client.model.name,
                    attempts=attempt + 1,
                    duration_seconds=time.perf_counter() - started,
                    cost=float(getattr(self.client, "last_cost", 0.0) or 0.0),
                )

            if attempt < attempts - 1:
                self._backoff(attempt, cancel_token, stage)

        message = f"Provider unavailable after {attempts} attempt(s): {last_error}"
        logger.error(message)
        raise ProviderUnavailableError(message) from last_error

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _await(
        self,
        future: Future,
        cancel_token: Optional[CancellationToken],
        stage: PipelineStage,
    ) -> str:
        deadline = time.monotonic() + self.timeout_seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ProviderCallTimeout(
                    f"Provider call exceeded {self.timeout_seconds}s"
                )
            try:
                return future.result(timeout=min(POLL_INTERVAL_SECONDS, remaining))
            except FutureTimeoutError:
                if future.done():
                    # the client itself raised a TimeoutError
                    raise
                self._check_cancelled(cancel_token, stage)

    def _backoff(
        self,
        attempt: int,
        cancel_token: Optional[CancellationToken],
        stage: PipelineStage,
    ) -> None:
        delay = self.backoff_seconds * (2**attempt)
        if delay <= 0:
            return
        logger.debug(f"Backing off {delay:.2f}s before retry")
        if cancel_token is not None:
            if cancel_token.wait(delay):
                self._check_cancelled(cancel_token, stage)
        else:
            time.sleep(delay)

    @staticmethod
    def _check_cancelled(
        cancel_token: Optional[CancellationToken], stage: PipelineStage
    ) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(stage)
