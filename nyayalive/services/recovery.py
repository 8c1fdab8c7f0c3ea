"""Retry with exponential backoff for one-shot model requests."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff(initial_delay: float) -> wait_exponential:
    """Wait ``initial_delay`` seconds after the first failure, doubling after each one."""
    return wait_exponential(multiplier=initial_delay, min=0, exp_base=2)


def _log_attempt(timeout: float) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        if isinstance(error, asyncio.TimeoutError):
            logger.error(f"Attempt {retry_state.attempt_number} failed: "
                         f"request timed out after {timeout:.0f}s")
        else:
            logger.error(f"Attempt {retry_state.attempt_number} failed: {error}")
    return log


async def with_error_recovery(api_call: Callable[[], Awaitable[T]],
                              fallback: T,
                              retries: int = 3,
                              initial_delay: float = 1.0,
                              timeout: float = 90.0) -> T:
    """Run ``api_call`` until it succeeds, falling back after ``retries`` attempts.

    Each attempt gets its own ``timeout``. Between attempts the delay starts
    at ``initial_delay`` seconds and doubles. When every attempt fails the
    failure is logged and ``fallback`` is returned instead of raising.
    Cancellation is never retried.

    Args:
        api_call: Zero-argument factory returning a fresh awaitable per attempt
        fallback: Value returned once all attempts have failed
        retries: Total number of attempts
        initial_delay: Seconds to wait after the first failure
        timeout: Per-attempt timeout in seconds
    """
    def give_up(retry_state: RetryCallState) -> T:
        logger.error("All retries failed. Returning fallback response.")
        return fallback

    async def attempt() -> T:
        return await asyncio.wait_for(api_call(), timeout=timeout)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, retries)),
        wait=backoff(initial_delay),
        retry=retry_if_exception_type(Exception),
        after=_log_attempt(timeout),
        retry_error_callback=give_up,
        reraise=False,
    )
    return await retrying(attempt)
