"""Unit tests for outcome and suite result types."""
from datetime import datetime, timedelta

from suite_types import Outcome, SuiteResult


def _outcome(sample, passed, error=None, seconds=10):
    return Outcome(
        descriptor=sample.descriptor,
        passed=passed,
        started_at=sample.started_at,
        finished_at=sample.started_at + timedelta(seconds=seconds),
        error=error,
    )


class TestOutcome:
    def test_properties(self, sample_outcome):
        assert sample_outcome.test_name == "MarkedSuite.a"
        assert sample_outcome.duration_seconds == 30.0
        assert sample_outcome.status == "passed"
        assert sample_outcome.reason == "Passed"

    def test_failure_reason(self, sample_outcome):
        failed = _outcome(sample_outcome, False, error=ValueError("bad input"))
        assert failed.status == "failed"
        assert failed.reason == "ValueError: bad input"
        assert _outcome(sample_outcome, False).reason == "Failed"

    def test_duration_never_negative(self, sample_outcome):
        assert _outcome(sample_outcome, True, seconds=-5).duration_seconds == 0.0


class TestSuiteResult:
    def test_aggregates(self, sample_outcome):
        outcomes = [sample_outcome, _outcome(sample_outcome, False), _outcome(sample_outcome, True)]
        suite = SuiteResult(
            outcomes=outcomes,
            started_at=datetime(2024, 1, 1, 10, 0, 0),
            finished_at=datetime(2024, 1, 1, 10, 2, 0),
        )

        assert suite.total == 3
        assert suite.passed == 2
        assert suite.failed == 1
        assert round(suite.pass_rate, 1) == 66.7
        assert suite.duration_seconds == 120.0
        assert suite.failed_tests == [outcomes[1]]
        assert len(suite.passed_tests) == 2

    def test_empty_suite(self):
        suite = SuiteResult(outcomes=[], started_at=datetime(2024, 1, 1), finished_at=datetime(2024, 1, 1))
        assert suite.pass_rate == 0.0
        assert suite.failed_tests == []
