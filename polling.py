"""Deadline-bounded polling of async probes."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_delay,
)

from exceptions import ConditionNotMet, PreconditionError, WaitTimeoutError

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.25

logger = logging.getLogger("steady.waits")


async def poll_until(
    probe: Callable[[], Awaitable[T]],
    timeout_seconds: float,
    interval: float = DEFAULT_POLL_INTERVAL,
    description: Optional[str] = None,
) -> T:
    """
    Call ``probe`` until it returns or the deadline passes.

    The probe signals "not yet" by raising ``ConditionNotMet``; every other
    exception escapes on the attempt that raised it. The deadline is measured
    from entry on the monotonic clock, and a zero timeout means a single probe
    with no sleep.

    Raises:
        WaitTimeoutError: no probe succeeded before the deadline.
        PreconditionError: negative timeout or non-positive interval.
    """
    if timeout_seconds < 0:
        raise PreconditionError(f"Timeout must not be negative, got {timeout_seconds}")
    if interval <= 0:
        raise PreconditionError(f"Poll interval must be positive, got {interval}")

    def wait_within_deadline(retry_state: RetryCallState) -> float:
        # never sleep past the deadline; the last probe runs at it
        elapsed = retry_state.seconds_since_start or 0.0
        return min(interval, max(0.0, timeout_seconds - elapsed))

    retrying = AsyncRetrying(
        stop=stop_after_delay(timeout_seconds),
        wait=wait_within_deadline,
        retry=retry_if_exception_type(ConditionNotMet),
    )
    try:
        async for attempt in retrying:
            with attempt:
                result = await probe()
    except RetryError as exc:
        last = exc.last_attempt
        what = description or "condition"
        logger.debug(f"Gave up waiting for {what} after {last.attempt_number} attempt(s)")
        raise WaitTimeoutError(
            f"Timed out after {timeout_seconds}s waiting for {what}",
            timeout=timeout_seconds,
            attempts=last.attempt_number,
        ) from last.exception()

    return result
