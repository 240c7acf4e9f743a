"""Re-run a failing test body up to a fixed retry budget."""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from context import RunContext, TestContext
from discovery import TestDescriptor
from exceptions import PreconditionError
from suite_types import Outcome

TestBody = Callable[[TestContext], Awaitable[Any]]


class TestState(str, Enum):
    """Lifecycle of one test instance."""
    __test__ = False

    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class RetryingRule:
    """
    Runs a test body, retrying it from scratch while it fails.

    A test is attempted ``retry_budget + 1`` times at most and only the last
    attempt's outcome is returned. Attempts never overlap. A
    ``PreconditionError`` ends the test on the attempt that raised it.
    """

    def __init__(self, retry_budget: int = 0, logger: Optional[logging.Logger] = None):
        if retry_budget < 0:
            raise PreconditionError(f"Retry budget must not be negative, got {retry_budget}")
        self.retry_budget = retry_budget
        self.logger = logger or logging.getLogger("steady.runner")

    def _transition(self, descriptor: TestDescriptor, old: TestState, new: TestState) -> TestState:
        self.logger.debug(f"{descriptor.name}: {old.value} -> {new.value}")
        return new

    async def run(self, descriptor: TestDescriptor, run_context: RunContext, body: TestBody) -> Outcome:
        """Run ``body`` with a fresh ``TestContext`` per attempt."""
        total = self.retry_budget + 1
        state = TestState.PENDING
        outcome: Optional[Outcome] = None

        for attempt in range(1, total + 1):
            if attempt > 1:
                self.logger.info(f"Retrying test {descriptor.name} (attempt {attempt}/{total})")

            ctx = TestContext(run_context, descriptor, attempt=attempt)
            state = self._transition(descriptor, state, TestState.RUNNING)
            started = datetime.utcnow()
            error: Optional[BaseException] = None
            try:
                await body(ctx)
            except Exception as exc:
                error = exc

            outcome = Outcome(
                descriptor=descriptor,
                passed=error is None,
                started_at=started,
                finished_at=datetime.utcnow(),
                error=error,
                session_id=ctx.session_id,
                unique_id=run_context.unique_id,
                attempts=attempt,
            )
            if error is None:
                self._transition(descriptor, state, TestState.PASSED)
                return outcome

            state = self._transition(descriptor, state, TestState.FAILED)
            self.logger.warning(f"Test {descriptor.name} failed on attempt {attempt}/{total}: {error}")
            if isinstance(error, PreconditionError):
                break

        return outcome
