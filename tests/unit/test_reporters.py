"""Unit tests for reporters module."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from xml.etree import ElementTree

import pytest

from reporters import JSONReporter, JUnitReporter, ReportFormat
from suite_types import Outcome, SuiteResult
from exceptions import WaitTimeoutError


def _suite(*outcomes: Outcome) -> SuiteResult:
    return SuiteResult(
        outcomes=list(outcomes),
        started_at=datetime(2024, 1, 1, 10, 0, 0),
        finished_at=datetime(2024, 1, 1, 10, 1, 0),
        unique_id="1234567890",
        suite_name="MarkedSuite",
    )


def _failing(sample: Outcome, error: BaseException) -> Outcome:
    return Outcome(
        descriptor=sample.descriptor,
        passed=False,
        started_at=sample.started_at,
        finished_at=sample.finished_at,
        error=error,
        session_id="def456",
        attempts=3,
    )


class TestReportFormat:
    def test_includes(self):
        assert ReportFormat.ALL.includes(ReportFormat.JSON)
        assert ReportFormat.JUNIT.includes(ReportFormat.JUNIT)
        assert not ReportFormat.JUNIT.includes(ReportFormat.JSON)
        assert not ReportFormat.NONE.includes(ReportFormat.JUNIT)


class TestJSONReporter:
    """Tests for JSON reporter."""

    def test_generates_valid_json(self, temp_dir: Path, sample_outcome: Outcome):
        report_path = JSONReporter().generate_suite(_suite(sample_outcome), temp_dir)

        assert report_path.exists()
        assert report_path.name == "suite-1234567890.json"

        data = json.loads(report_path.read_text())
        assert "tests" in data
        assert "summary" in data
        assert len(data["tests"]) == 1

    def test_json_structure(self, temp_dir: Path, sample_outcome: Outcome):
        report_path = JSONReporter().generate_suite(_suite(sample_outcome), temp_dir)
        data = json.loads(report_path.read_text())

        test = data["tests"][0]
        assert test["test"] == {"suite": "MarkedSuite", "method": "a", "tags": []}
        assert test["result"]["passed"] is True
        assert test["result"]["session_id"] == "abc123"
        assert test["result"]["duration_seconds"] == 30.0
        assert test["error"] is None

    def test_suite_summary(self, temp_dir: Path, sample_outcome: Outcome):
        failing = _failing(sample_outcome, AssertionError("wrong title"))
        report_path = JSONReporter().generate_suite(_suite(sample_outcome, failing), temp_dir)
        data = json.loads(report_path.read_text())

        assert data["summary"]["total"] == 2
        assert data["summary"]["passed"] == 1
        assert data["summary"]["failed"] == 1
        assert data["summary"]["pass_rate"] == 50.0
        assert data["summary"]["retried"] == 1
        assert data["failed_tests"] == [{"name": "MarkedSuite.a", "reason": "AssertionError: wrong title"}]
        assert data["tests"][1]["error"]["type"] == "AssertionError"


class TestJUnitReporter:
    """Tests for JUnit XML reporter."""

    def test_generates_valid_xml(self, temp_dir: Path, sample_outcome: Outcome):
        report_path = JUnitReporter().generate_suite(_suite(sample_outcome), temp_dir)

        assert report_path.exists()
        assert report_path.suffix == ".xml"

        root = ElementTree.parse(report_path).getroot()
        assert root.tag == "testsuite"
        assert root.get("name") == "MarkedSuite"
        assert root.get("tests") == "1"
        assert root.get("failures") == "0"
        assert root.get("errors") == "0"

    def test_testcase_attributes(self, temp_dir: Path, sample_outcome: Outcome):
        report_path = JUnitReporter().generate_suite(_suite(sample_outcome), temp_dir)

        testcase = ElementTree.parse(report_path).getroot().find("testcase")
        assert testcase.get("name") == "a"
        assert testcase.get("classname") == "MarkedSuite"
        assert testcase.get("time") == "30.000"
        assert "session_id=abc123" in testcase.find("system-out").text

    def test_assertion_is_failure_and_timeout_is_error(self, temp_dir: Path, sample_outcome: Outcome):
        results = _suite(
            sample_outcome,
            _failing(sample_outcome, AssertionError("Expected <b> & \"c\"")),
            _failing(sample_outcome, WaitTimeoutError("Timed out")),
        )
        report_path = JUnitReporter().generate_suite(results, temp_dir)

        root = ElementTree.parse(report_path).getroot()
        assert root.get("tests") == "3"
        assert root.get("failures") == "1"
        assert root.get("errors") == "1"

        failure = root.find(".//failure")
        assert failure.get("message") == "Expected <b> & \"c\""
        assert failure.get("type") == "AssertionError"
        assert "Attempts: 3" in failure.text
        assert root.find(".//error").get("type") == "WaitTimeoutError"

    def test_properties(self, temp_dir: Path, sample_outcome: Outcome):
        report_path = JUnitReporter().generate_suite(_suite(sample_outcome), temp_dir)

        props = {p.get("name"): p.get("value") for p in ElementTree.parse(report_path).getroot().iter("property")}
        assert props["unique_id"] == "1234567890"
        assert props["reporter"] == "steady-junit"

    @pytest.mark.parametrize("reporter_cls", [JSONReporter, JUnitReporter])
    def test_creates_output_dir(self, temp_dir: Path, sample_outcome: Outcome, reporter_cls):
        output_dir = temp_dir / "nested" / "reports"
        report_path = reporter_cls().generate_suite(_suite(sample_outcome), output_dir)
        assert report_path.parent == output_dir

    def test_cdata_terminator_in_message_stays_well_formed(self, temp_dir: Path, sample_outcome: Outcome):
        failing = _failing(sample_outcome, AssertionError("got ]]> in page"))
        report_path = JUnitReporter().generate_suite(_suite(failing), temp_dir)

        failure = ElementTree.parse(report_path).getroot().find(".//failure")
        assert failure.get("message") == "got ]]> in page"
        assert "AssertionError: got ]]> in page" in failure.text
