"""JUnit XML report generator for CI integration."""
from __future__ import annotations

import html
import traceback
from datetime import datetime
from pathlib import Path

from reporters.base import BaseReporter, ReportFormat
from suite_types import Outcome, SuiteResult


class JUnitReporter(BaseReporter):
    """Generate JUnit XML reports for CI/CD integration."""

    @property
    def format(self) -> ReportFormat:
        return ReportFormat.JUNIT

    def _escape_xml(self, text: str) -> str:
        """Escape special XML characters."""
        return html.escape(str(text), quote=True)

    def _cdata(self, text: str) -> str:
        """Split any CDATA terminator so the section stays well formed."""
        return str(text).replace("]]>", "]]]]><![CDATA[>")

    def _format_timestamp(self, dt: datetime) -> str:
        """Format datetime for JUnit XML."""
        return dt.strftime("%Y-%m-%dT%H:%M:%S")

    def _build_testcase_xml(self, outcome: Outcome) -> str:
        """Build XML for a single test case."""
        lines = []

        classname = self._escape_xml(outcome.descriptor.suite_class.__qualname__)
        name = self._escape_xml(outcome.descriptor.method_name)
        time_sec = f"{outcome.duration_seconds:.3f}"

        lines.append(f'    <testcase classname="{classname}" name="{name}" time="{time_sec}">')

        if not outcome.passed:
            error = outcome.error
            failure_msg = self._escape_xml(str(error) if error is not None else outcome.reason)
            failure_type = type(error).__name__ if error is not None else "TestFailure"
            tag = "failure" if error is None or isinstance(error, AssertionError) else "error"

            lines.append(f'      <{tag} message="{failure_msg}" type="{failure_type}"><![CDATA[')
            lines.append(self._cdata(f"Test: {outcome.test_name}"))
            lines.append(f"Attempts: {outcome.attempts}")
            lines.append(self._cdata(f"Session: {outcome.session_id or 'N/A'}"))
            if error is not None:
                lines.append("")
                lines.append(self._cdata("".join(traceback.format_exception(error)).rstrip()))
            lines.append(f"]]></{tag}>")

        if outcome.session_id:
            lines.append(f"      <system-out><![CDATA[session_id={self._cdata(outcome.session_id)}]]></system-out>")

        lines.append("    </testcase>")
        return "\n".join(lines)

    def generate_suite(self, suite: SuiteResult, output_dir: Path) -> Path:
        """Generate combined JUnit XML report for a suite run."""
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        filename = f"junit-{suite.unique_id or timestamp}.xml"
        target = output_dir / filename

        failed = suite.failed_tests
        failures = sum(1 for o in failed if o.error is None or isinstance(o.error, AssertionError))
        errors = len(failed) - failures
        suite_name = self._escape_xml(suite.suite_name or "steady")

        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        lines.append(
            f'<testsuite name="{suite_name}" '
            f'tests="{suite.total}" '
            f'failures="{failures}" '
            f'errors="{errors}" '
            f'skipped="0" '
            f'time="{suite.duration_seconds:.3f}" '
            f'timestamp="{self._format_timestamp(suite.started_at)}">'
        )

        lines.append("  <properties>")
        lines.append('    <property name="reporter" value="steady-junit"/>')
        lines.append(f'    <property name="unique_id" value="{self._escape_xml(suite.unique_id or "")}"/>')
        lines.append(f'    <property name="generated_at" value="{datetime.utcnow().isoformat()}"/>')
        lines.append("  </properties>")

        for outcome in suite.outcomes:
            lines.append(self._build_testcase_xml(outcome))

        lines.append("</testsuite>")

        target.write_text("\n".join(lines), encoding="utf-8")
        return target
