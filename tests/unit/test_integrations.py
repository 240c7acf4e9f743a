"""Unit tests for reporting integrations."""
from datetime import datetime

import pytest

from integrations import IntegrationManager, ReportingCollaborator
from suite_types import Outcome


class RecordingCollaborator(ReportingCollaborator):
    def __init__(self, enabled=True, fail=False):
        self.enabled = enabled
        self.fail = fail
        self.calls = []

    @property
    def is_enabled(self):
        return self.enabled

    async def test_outcome(self, passed, session_id):
        if self.fail:
            raise RuntimeError("service unavailable")
        self.calls.append(("outcome", passed, session_id))

    async def test_failed(self, descriptor, error, session_id):
        self.calls.append(("failed", descriptor.method_name, str(error), session_id))

    async def test_passed(self, descriptor, session_id):
        self.calls.append(("passed", descriptor.method_name, session_id))


def _failed(outcome, session_id="abc123"):
    return Outcome(
        descriptor=outcome.descriptor,
        passed=False,
        started_at=datetime(2024, 1, 1),
        finished_at=datetime(2024, 1, 1),
        error=AssertionError("boom"),
        session_id=session_id,
    )


class TestIntegrationManager:
    @pytest.mark.asyncio
    async def test_passed_outcome_notifies_in_order(self, sample_outcome):
        collaborator = RecordingCollaborator()

        await IntegrationManager([collaborator]).report(sample_outcome)

        assert collaborator.calls == [("outcome", True, "abc123"), ("passed", "a", "abc123")]

    @pytest.mark.asyncio
    async def test_failed_outcome_passes_error(self, sample_outcome):
        collaborator = RecordingCollaborator()

        await IntegrationManager([collaborator]).report(_failed(sample_outcome))

        assert collaborator.calls == [("outcome", False, "abc123"), ("failed", "a", "boom", "abc123")]

    @pytest.mark.asyncio
    async def test_skipped_without_session(self, sample_outcome):
        collaborator = RecordingCollaborator()

        await IntegrationManager([collaborator]).report(_failed(sample_outcome, session_id=None))

        assert collaborator.calls == []

    @pytest.mark.asyncio
    async def test_disabled_collaborator_skipped(self, sample_outcome):
        disabled = RecordingCollaborator(enabled=False)
        manager = IntegrationManager()
        manager.add(disabled)

        await manager.report(sample_outcome)

        assert disabled.calls == []

    @pytest.mark.asyncio
    async def test_failing_collaborator_does_not_block_others(self, sample_outcome, caplog):
        broken = RecordingCollaborator(fail=True)
        healthy = RecordingCollaborator()

        await IntegrationManager([broken, healthy]).report(sample_outcome)

        assert len(healthy.calls) == 2
        assert any("RecordingCollaborator failed" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_default_hooks_are_no_ops(self, sample_outcome):
        class Minimal(ReportingCollaborator):
            is_enabled = True

        collaborator = Minimal()
        await IntegrationManager([collaborator]).report(sample_outcome)

        assert collaborator.name == "Minimal"
