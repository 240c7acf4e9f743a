"""Run-scoped and test-scoped state handed to test bodies."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from driver import ElementDriver
from elements import DEFAULT_NOT_MOVING_INTERVAL, DEFAULT_WAIT_SECONDS, DocumentScope
from exceptions import PreconditionError
from polling import DEFAULT_POLL_INTERVAL

if TYPE_CHECKING:
    from discovery import TestDescriptor

UNIQUE_ID_LENGTH = 10


def generate_unique_id() -> str:
    """Random 10-digit run id with a non-zero leading digit."""
    first = str(random.randint(1, 9))
    rest = "".join(str(random.randint(0, 9)) for _ in range(UNIQUE_ID_LENGTH - 1))
    return first + rest


def validate_unique_id(value: str) -> str:
    if not value or len(value) != UNIQUE_ID_LENGTH or not value.isdigit():
        raise PreconditionError(f"Unique id must be {UNIQUE_ID_LENGTH} digits, got {value!r}")
    return value


@dataclass(frozen=True)
class RunContext:
    """Settings shared read-only by every test of one suite invocation."""

    unique_id: str = field(default_factory=generate_unique_id)
    wait_seconds: float = DEFAULT_WAIT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    not_moving_interval: float = DEFAULT_NOT_MOVING_INTERVAL

    def __post_init__(self) -> None:
        validate_unique_id(self.unique_id)
        if self.wait_seconds < 0:
            raise PreconditionError(f"Wait time must not be negative, got {self.wait_seconds}")


class TestContext:
    """State owned by a single attempt of a single test.

    The session id may be written once by the test body; the runner reads
    it after the body finishes.
    """

    __test__ = False

    def __init__(self, run: RunContext, descriptor: "TestDescriptor", attempt: int = 1):
        self.run = run
        self.descriptor = descriptor
        self.attempt = attempt
        self._session_id: Optional[str] = None

    @property
    def unique_id(self) -> str:
        return self.run.unique_id

    @property
    def wait_seconds(self) -> float:
        return self.run.wait_seconds

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def full_test_name(self) -> str:
        """``<unique id>:<suite class>:<method>``."""
        return f"{self.unique_id}:{self.descriptor.suite_class.__name__}:{self.descriptor.method_name}"

    def set_session_id(self, session_id: str) -> None:
        if not session_id:
            raise PreconditionError("Session id must not be empty")
        if self._session_id is not None:
            raise PreconditionError(
                f"Session id already set for {self.descriptor.name}",
                {"session_id": self._session_id},
            )
        self._session_id = session_id

    def document(self, driver: ElementDriver) -> DocumentScope:
        """Whole-page search scope using this run's wait settings."""
        return DocumentScope(
            driver,
            wait_seconds=self.run.wait_seconds,
            poll_interval=self.run.poll_interval,
            not_moving_interval=self.run.not_moving_interval,
        )

    def attach(self, driver: ElementDriver) -> DocumentScope:
        """Record the driver's session id and return a document scope for it."""
        if driver.session_id is None:
            raise PreconditionError("Driver has no session yet; start it before attaching")
        self.set_session_id(driver.session_id)
        return self.document(driver)
