"""Custom exception hierarchy for the steady test runner."""
from __future__ import annotations

from typing import Any, Optional


class SteadyError(Exception):
    """Base exception for all steady-related errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class PreconditionError(SteadyError, ValueError):
    """Raised on programmer errors such as a missing locator or empty text."""

    pass


# Wait-related exceptions
class WaitError(SteadyError):
    """Base exception for polling and wait errors."""

    pass


class ConditionNotMet(WaitError):
    """Raised by a probe when its condition does not hold yet.

    This is the only error the polling loop retries.
    """

    pass


class WaitTimeoutError(WaitError, TimeoutError):
    """Raised when a condition never became true before its deadline."""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        attempts: Optional[int] = None,
        locator: Optional[Any] = None,
    ):
        details: dict[str, Any] = {}
        if timeout is not None:
            details["timeout"] = timeout
        if attempts is not None:
            details["attempts"] = attempts
        if locator is not None:
            details["locator"] = str(locator)
        super().__init__(message, details)
        self.timeout = timeout
        self.attempts = attempts
        self.locator = locator


# Driver-related exceptions
class StructuralError(SteadyError):
    """Raised when the driver reports a fault that retrying cannot fix."""

    pass


class InvalidLocatorError(StructuralError):
    """Raised when a locator cannot be evaluated by the driver."""

    def __init__(self, message: str, locator: Optional[Any] = None):
        details = {"locator": str(locator)} if locator is not None else {}
        super().__init__(message, details)
        self.locator = locator


class StaleElementError(StructuralError):
    """Raised when an element handle no longer refers to a live node."""

    pass


class DriverNotStartedError(StructuralError):
    """Raised when attempting to use the driver before starting it."""

    def __init__(self):
        super().__init__("Driver has not been started. Call start() first.")


class NavigationError(StructuralError):
    """Raised when page navigation fails."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        details: dict[str, Any] = {}
        if url:
            details["url"] = url
        if timeout:
            details["timeout"] = timeout
        super().__init__(message, details)
        self.url = url
        self.timeout = timeout


# Test definition exceptions
class TestDefinitionError(SteadyError):
    """Base exception for suite definition/loading errors."""

    __test__ = False


class SuiteLoadError(TestDefinitionError):
    """Raised when a suite class cannot be imported."""

    def __init__(self, message: str, suite_path: Optional[str] = None):
        details = {"suite_path": suite_path} if suite_path else {}
        super().__init__(message, details)
        self.suite_path = suite_path


# Test execution exceptions
class TestExecutionError(SteadyError):
    """Raised when the runner cannot execute a scheduled test."""

    __test__ = False

    def __init__(self, message: str, test_name: Optional[str] = None):
        details = {"test_name": test_name} if test_name else {}
        super().__init__(message, details)
        self.test_name = test_name


# Configuration exceptions
class ConfigurationError(SteadyError):
    """Raised when configuration is invalid."""

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when a required config file is not found."""

    def __init__(self, file_path: str):
        super().__init__(f"Configuration file not found: {file_path}", {"file_path": file_path})
        self.file_path = file_path
