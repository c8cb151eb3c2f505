import threading
import time

import pytest

from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import (
    PipelineCancelledError,
    ProviderUnavailableError,
)
from codeforge.application.services.generation_cache import (
    GenerationCache,
    request_fingerprint,
)
from codeforge.domain.models import GenerationRequest


def test_fingerprint_is_stable_and_content_based():
    a = GenerationRequest(prompt="todo list app", context={"b": 1, "a": 2})
    b = GenerationRequest(prompt="todo list app", context={"a": 2, "b": 1})
    c = GenerationRequest(prompt="todo list app", framework="vue")

    assert request_fingerprint(a) == request_fingerprint(b)
    assert request_fingerprint(a) != request_fingerprint(c)
    assert len(request_fingerprint(a)) == 64


def test_concurrent_callers_share_one_computation():
    cache = GenerationCache()
    calls = []
    release = threading.Event()
    sentinel = object()

    def compute():
        calls.append(1)
        release.wait(2)
        return sentinel

    results = []

    def worker():
        results.append(cache.get_or_compute("fp", compute))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    time.sleep(0.1)
    release.set()
    for t in threads:
        t.join(5)

    assert len(calls) == 1
    assert len(results) == 4
    assert all(r is sentinel for r in results)
    assert cache.get("fp") is sentinel


def test_failures_are_not_cached():
    cache = GenerationCache()
    attempts = []

    def failing():
        attempts.append(1)
        raise ProviderUnavailableError("down")

    for _ in range(2):
        with pytest.raises(ProviderUnavailableError):
            cache.get_or_compute("fp", failing)
    assert len(attempts) == 2
    assert cache.get("fp") is None


def test_cancelled_waiter_leaves_leader_running():
    cache = GenerationCache()
    release = threading.Event()
    leader_result = []

    def slow():
        release.wait(2)
        return "done"

    leader = threading.Thread(
        target=lambda: leader_result.append(cache.get_or_compute("fp", slow))
    )
    leader.start()
    time.sleep(0.05)

    token = CancellationToken()
    token.cancel()
    with pytest.raises(PipelineCancelledError):
        cache.get_or_compute("fp", slow, token)

    release.set()
    leader.join(5)
    assert leader_result == ["done"]


def test_oldest_entry_is_evicted():
    cache = GenerationCache(max_entries=2)
    for key in ("a", "b", "c"):
        cache.get_or_compute(key, lambda k=key: k)
    assert cache.get("a") is None
    assert cache.get("c") == "c"
