"""Typed results produced by suite runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from discovery import TestDescriptor


@dataclass
class Outcome:
    """Final result of a test after its last attempt."""

    descriptor: TestDescriptor
    passed: bool
    started_at: datetime
    finished_at: datetime
    error: Optional[BaseException] = None
    session_id: Optional[str] = None
    unique_id: Optional[str] = None
    attempts: int = 1

    @property
    def test_name(self) -> str:
        return self.descriptor.name

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.finished_at - self.started_at).total_seconds())

    @property
    def status(self) -> str:
        return "passed" if self.passed else "failed"

    @property
    def reason(self) -> str:
        if self.error is None:
            return "Passed" if self.passed else "Failed"
        return f"{type(self.error).__name__}: {self.error}"


@dataclass
class SuiteResult:
    """Aggregated results for a suite run."""

    outcomes: List[Outcome]
    started_at: datetime
    finished_at: datetime
    unique_id: Optional[str] = None
    suite_name: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def pass_rate(self) -> float:
        return (self.passed / self.total * 100) if self.total else 0.0

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.finished_at - self.started_at).total_seconds())

    @property
    def failed_tests(self) -> List[Outcome]:
        return [o for o in self.outcomes if not o.passed]

    @property
    def passed_tests(self) -> List[Outcome]:
        return [o for o in self.outcomes if o.passed]
