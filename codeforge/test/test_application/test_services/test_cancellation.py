import threading

import pytest

from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import PipelineCancelledError
from codeforge.domain.model_types import PipelineStage


def test_token_starts_uncancelled():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled()
    assert token.wait(0.01) is False


def test_cancel_raises_with_stage_and_reason():
    token = CancellationToken()
    token.cancel("user pressed ctrl-c")
    with pytest.raises(PipelineCancelledError) as exc_info:
        token.raise_if_cancelled(PipelineStage.VALIDATE)
    assert exc_info.value.stage == PipelineStage.VALIDATE
    assert exc_info.value.code == "cancelled"
    assert "ctrl-c" in str(exc_info.value)


def test_wait_returns_early_when_cancelled_from_another_thread():
    token = CancellationToken()
    timer = threading.Timer(0.05, token.cancel)
    timer.start()
    assert token.wait(5) is True
    timer.join()
