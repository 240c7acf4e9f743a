"""Fan final outcomes out to the configured reporting collaborators."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from integrations.base import ReportingCollaborator
from suite_types import Outcome


class IntegrationManager:
    """Notifies every enabled collaborator of an outcome that has a session id."""

    def __init__(
        self,
        collaborators: Optional[Iterable[ReportingCollaborator]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.collaborators: List[ReportingCollaborator] = list(collaborators or [])
        self.logger = logger or logging.getLogger("steady.integrations")

    def add(self, collaborator: ReportingCollaborator) -> None:
        self.collaborators.append(collaborator)

    async def report(self, outcome: Outcome) -> None:
        """
        Forward ``outcome`` to each enabled collaborator.

        Outcomes without a session id are not forwarded. A collaborator that
        raises is logged and skipped; the others are still notified.
        """
        session_id = outcome.session_id
        if not session_id:
            self.logger.debug(f"No session id for {outcome.test_name}; skipping integrations")
            return

        for collaborator in self.collaborators:
            if not collaborator.is_enabled:
                continue
            try:
                await collaborator.test_outcome(outcome.passed, session_id)
                if outcome.passed:
                    await collaborator.test_passed(outcome.descriptor, session_id)
                else:
                    await collaborator.test_failed(outcome.descriptor, outcome.error, session_id)
            except Exception as exc:
                self.logger.error(
                    f"Integration {collaborator.name} failed to report {outcome.test_name}: {exc}",
                    exc_info=True,
                )
