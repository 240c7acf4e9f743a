"""Interface for external services that receive test outcomes."""
from __future__ import annotations

from abc import ABC, abstractmethod

from discovery import TestDescriptor


class ReportingCollaborator(ABC):
    """
    External reporting back-end, such as a browser farm or a chat channel.

    Implementations are called from several workers at once and must be
    safe to use concurrently. The notification hooks do nothing by default;
    override the ones the back-end cares about.
    """

    @property
    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether this collaborator should be notified at all."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__

    async def test_outcome(self, passed: bool, session_id: str) -> None:
        """Record the pass/fail status of the automation session."""
        return None

    async def test_failed(self, descriptor: TestDescriptor, error: BaseException, session_id: str) -> None:
        return None

    async def test_passed(self, descriptor: TestDescriptor, session_id: str) -> None:
        return None
