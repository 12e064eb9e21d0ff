"""
Unit tests for the retry policy.
"""

import pytest

from app.core.exceptions import GenerationError, LLMError, OverloadError, is_overload_error
from app.services.retry import RetryPolicy, run_with_retry


class Recorder:
    def __init__(self):
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


def _failing(*errors, result="done"):
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= len(errors):
            raise errors[calls["count"] - 1]
        return result

    return operation, calls


@pytest.mark.parametrize(
    "message",
    [
        "Model is overloaded",
        "429 Too Many Requests",
        "Rate limit reached for requests",
        "RESOURCE_EXHAUSTED",
        "503 Service Unavailable",
    ],
)
def test_overload_messages_are_retryable(message):
    assert is_overload_error(RuntimeError(message))


def test_other_errors_are_not_retryable():
    assert not is_overload_error(RuntimeError("invalid api key"))
    assert not is_overload_error(ValueError("Failed to generate content"))
    assert not is_overload_error(GenerationError("overloaded"))
    assert is_overload_error(OverloadError("anything"))


@pytest.mark.asyncio
async def test_succeeds_after_transient_overload():
    recorder = Recorder()
    operation, calls = _failing(OverloadError("busy"))

    result = await run_with_retry(
        operation,
        RetryPolicy(base_delay=1.0, max_jitter=0.5),
        sleep=recorder.sleep,
        rand=lambda low, high: 0.0,
    )

    assert result == "done"
    assert calls["count"] == 2
    assert recorder.sleeps == [1.0]


@pytest.mark.asyncio
async def test_exhausted_attempts_reraise_last_error():
    recorder = Recorder()
    last = OverloadError("still busy")
    operation, calls = _failing(OverloadError("busy"), OverloadError("busy"), last)

    with pytest.raises(OverloadError) as exc_info:
        await run_with_retry(
            operation,
            RetryPolicy(max_attempts=3, base_delay=1.0, max_jitter=0.5),
            sleep=recorder.sleep,
            rand=lambda low, high: high,
        )

    assert exc_info.value is last
    assert calls["count"] == 3
    assert recorder.sleeps == [1.5, 2.5]


@pytest.mark.asyncio
async def test_non_retryable_error_fails_immediately():
    recorder = Recorder()
    operation, calls = _failing(LLMError("invalid api key"))

    with pytest.raises(LLMError):
        await run_with_retry(operation, RetryPolicy(), sleep=recorder.sleep)

    assert calls["count"] == 1
    assert recorder.sleeps == []


@pytest.mark.asyncio
async def test_delays_strictly_increase_even_with_large_jitter():
    recorder = Recorder()
    retries = []
    operation, _ = _failing(*[OverloadError("busy")] * 5)
    policy = RetryPolicy(max_attempts=5, base_delay=0.2, max_jitter=10.0)
    jitters = iter([policy.jitter_cap, 0.0, policy.jitter_cap, 0.0])

    with pytest.raises(OverloadError):
        await run_with_retry(
            operation,
            policy,
            sleep=recorder.sleep,
            rand=lambda low, high: next(jitters),
            on_retry=lambda attempt, delay, exc: retries.append(attempt),
        )

    assert policy.jitter_cap == 0.1
    assert retries == [1, 2, 3, 4]
    assert all(later > earlier for earlier, later in zip(recorder.sleeps, recorder.sleeps[1:]))


def test_backoff_doubles():
    policy = RetryPolicy(base_delay=0.5)

    assert [policy.backoff(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]
