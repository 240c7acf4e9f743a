"""JSON report generator for suite runs."""
from __future__ import annotations

import json
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from reporters.base import BaseReporter, ReportFormat
from suite_types import Outcome, SuiteResult


class JSONReporter(BaseReporter):
    """Generate machine-readable JSON reports."""

    @property
    def format(self) -> ReportFormat:
        return ReportFormat.JSON

    def _outcome_to_dict(self, outcome: Outcome) -> Dict[str, Any]:
        """Convert Outcome to JSON-serializable dict."""
        error = None
        if outcome.error is not None:
            error = {
                "type": type(outcome.error).__name__,
                "message": str(outcome.error),
                "traceback": "".join(traceback.format_exception(outcome.error)),
            }
        return {
            "test": {
                "suite": outcome.descriptor.suite_class.__name__,
                "method": outcome.descriptor.method_name,
                "tags": sorted(outcome.descriptor.tags),
            },
            "result": {
                "passed": outcome.passed,
                "attempts": outcome.attempts,
                "session_id": outcome.session_id,
                "started_at": outcome.started_at.isoformat(),
                "finished_at": outcome.finished_at.isoformat(),
                "duration_seconds": outcome.duration_seconds,
            },
            "error": error,
        }

    def generate_suite(self, suite: SuiteResult, output_dir: Path) -> Path:
        """Generate combined JSON report for a suite run."""
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        filename = f"suite-{suite.unique_id or timestamp}.json"
        target = output_dir / filename

        durations = [o.duration_seconds for o in suite.outcomes]
        total_duration = sum(durations)
        avg_duration = total_duration / len(durations) if durations else 0

        report_data = {
            "generated_at": datetime.utcnow().isoformat(),
            "report_version": "1.0",
            "suite": suite.suite_name,
            "unique_id": suite.unique_id,
            "tests": [self._outcome_to_dict(o) for o in suite.outcomes],
            "summary": {
                "total": suite.total,
                "passed": suite.passed,
                "failed": suite.failed,
                "pass_rate": round(suite.pass_rate, 2),
                "duration_seconds": round(suite.duration_seconds, 2),
                "total_test_seconds": round(total_duration, 2),
                "avg_test_seconds": round(avg_duration, 2),
                "retried": sum(1 for o in suite.outcomes if o.attempts > 1),
            },
            "failed_tests": [
                {"name": o.test_name, "reason": o.reason}
                for o in suite.failed_tests
            ],
        }

        target.write_text(json.dumps(report_data, indent=2), encoding="utf-8")
        return target
