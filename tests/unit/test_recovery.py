"""Unit tests for retry with exponential backoff."""

import asyncio

import pytest
from tenacity import RetryCallState

from nyayalive.services.recovery import backoff, with_error_recovery


def flaky(failures: int, result="ok"):
    """Factory whose first ``failures`` calls raise."""
    calls = {"count": 0}

    async def call():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise ConnectionError(f"failure {calls['count']}")
        return result

    return call, calls


@pytest.mark.unit
class TestWithErrorRecovery:

    def test_first_success_returns_result(self):
        call, calls = flaky(0)
        assert asyncio.run(with_error_recovery(call, "fallback", initial_delay=0)) == "ok"
        assert calls["count"] == 1

    def test_recovers_after_transient_failures(self):
        call, calls = flaky(2)
        assert asyncio.run(with_error_recovery(call, "fallback", retries=3, initial_delay=0)) == "ok"
        assert calls["count"] == 3

    def test_returns_fallback_when_all_attempts_fail(self, caplog):
        call, calls = flaky(10)
        result = asyncio.run(with_error_recovery(call, "fallback", retries=3, initial_delay=0))

        assert result == "fallback"
        assert calls["count"] == 3
        assert "Attempt 1 failed: failure 1" in caplog.text
        assert "Attempt 3 failed: failure 3" in caplog.text
        assert "All retries failed" in caplog.text

    def test_delay_doubles_between_attempts(self):
        wait = backoff(1.0)
        state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})

        delays = []
        for attempt_number in (1, 2, 3):
            state.attempt_number = attempt_number
            delays.append(wait(state))

        assert delays == [1.0, 2.0, 4.0]

    def test_timeout_counts_as_failure(self, caplog):
        async def slow():
            await asyncio.sleep(5)
            return "late"

        result = asyncio.run(with_error_recovery(slow, "fallback", retries=2, initial_delay=0, timeout=0.01))
        assert result == "fallback"
        assert "timed out" in caplog.text

    def test_cancellation_is_not_retried(self):
        calls = {"count": 0}

        async def cancelled():
            calls["count"] += 1
            raise asyncio.CancelledError()

        async def scenario():
            with pytest.raises(asyncio.CancelledError):
                await with_error_recovery(cancelled, "fallback", retries=3, initial_delay=0)

        asyncio.run(scenario())
        assert calls["count"] == 1
