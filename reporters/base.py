"""Base reporter interface for suite runs."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from suite_types import SuiteResult


class ReportFormat(str, Enum):
    """Supported report formats."""
    JSON = "json"
    JUNIT = "junit"
    ALL = "all"
    NONE = "none"

    def includes(self, fmt: "ReportFormat") -> bool:
        if self is ReportFormat.NONE:
            return False
        return self is ReportFormat.ALL or self is fmt


class BaseReporter(ABC):
    """Abstract base class for report generators."""

    @abstractmethod
    def generate_suite(self, suite: SuiteResult, output_dir: Path) -> Path:
        """
        Generate a combined report for a suite run.

        Args:
            suite: Aggregated outcomes of the run
            output_dir: Directory to write report to

        Returns:
            Path to the generated report file
        """
        pass

    @property
    @abstractmethod
    def format(self) -> ReportFormat:
        """Return the report format this reporter generates."""
        pass
