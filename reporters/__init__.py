"""Report generators for suite runs."""
from reporters.base import BaseReporter, ReportFormat
from reporters.json_reporter import JSONReporter
from reporters.junit import JUnitReporter

__all__ = [
    "BaseReporter",
    "ReportFormat",
    "JSONReporter",
    "JUnitReporter",
]
