"""Unit tests for polling module."""
from __future__ import annotations

import time

import pytest

from exceptions import ConditionNotMet, InvalidLocatorError, PreconditionError, WaitTimeoutError
from polling import poll_until


class Probe:
    """Counts calls and succeeds from the ``succeed_on``-th call."""

    def __init__(self, succeed_on=None, value="done"):
        self.calls = 0
        self.succeed_on = succeed_on
        self.value = value

    async def __call__(self):
        self.calls += 1
        if self.succeed_on is not None and self.calls >= self.succeed_on:
            return self.value
        raise ConditionNotMet(f"not yet ({self.calls})")


class TestPollUntil:
    """Tests for poll_until."""

    @pytest.mark.asyncio
    async def test_immediate_success(self):
        probe = Probe(succeed_on=1, value=42)
        assert await poll_until(probe, 1, interval=0.01) == 42
        assert probe.calls == 1

    @pytest.mark.asyncio
    async def test_eventual_success_stops_polling(self):
        probe = Probe(succeed_on=3)
        assert await poll_until(probe, 5, interval=0.01) == "done"
        assert probe.calls == 3

    @pytest.mark.asyncio
    async def test_timeout_raises_after_deadline(self):
        probe = Probe()
        started = time.monotonic()
        with pytest.raises(WaitTimeoutError) as exc_info:
            await poll_until(probe, 0.2, interval=0.02, description="the thing")
        elapsed = time.monotonic() - started

        assert elapsed >= 0.2
        assert probe.calls > 1
        assert exc_info.value.timeout == 0.2
        assert exc_info.value.attempts == probe.calls
        assert "the thing" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ConditionNotMet)

    @pytest.mark.asyncio
    async def test_timeout_is_builtin_timeout_error(self):
        with pytest.raises(TimeoutError):
            await poll_until(Probe(), 0, interval=0.01)

    @pytest.mark.asyncio
    async def test_zero_timeout_probes_once(self):
        probe = Probe()
        started = time.monotonic()
        with pytest.raises(WaitTimeoutError):
            await poll_until(probe, 0, interval=1.0)
        assert probe.calls == 1
        assert time.monotonic() - started < 0.5

    @pytest.mark.asyncio
    async def test_zero_timeout_success(self):
        assert await poll_until(Probe(succeed_on=1, value="x"), 0) == "x"

    @pytest.mark.asyncio
    async def test_other_errors_propagate_immediately(self):
        calls = {"n": 0}

        async def probe():
            calls["n"] += 1
            raise InvalidLocatorError("bad selector")

        started = time.monotonic()
        with pytest.raises(InvalidLocatorError):
            await poll_until(probe, 5, interval=0.01)
        assert calls["n"] == 1
        assert time.monotonic() - started < 1

    @pytest.mark.asyncio
    async def test_negative_timeout_rejected(self):
        with pytest.raises(PreconditionError):
            await poll_until(Probe(succeed_on=1), -1)

    @pytest.mark.asyncio
    async def test_non_positive_interval_rejected(self):
        with pytest.raises(PreconditionError):
            await poll_until(Probe(succeed_on=1), 1, interval=0)

    @pytest.mark.asyncio
    async def test_no_probe_after_deadline(self):
        started = time.monotonic()
        call_times = []

        async def late_probe():
            elapsed = time.monotonic() - started
            call_times.append(elapsed)
            if elapsed >= 0.5:
                return "late"
            raise ConditionNotMet("too early")

        with pytest.raises(WaitTimeoutError):
            await poll_until(late_probe, 0.3, interval=0.2)

        assert len(call_times) == 3
        assert call_times[-1] < 0.45
