"""
Error taxonomy for the RPC comparison tool.

Per-call RPC failures are not exceptions at this level: they are converted to
``EndpointStatus`` values and recorded as data. The exceptions below are the
run-level conditions that stop the tool or decide its exit code.
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Categories of errors."""
    SETUP = "setup"
    ARCHIVE = "archive"
    GENERATION = "generation"
    TEST_RUN = "test_run"
    SYSTEM = "system"


class RpcCompareError(Exception):
    """Base exception for the RPC comparison tool."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.SYSTEM,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM, **kwargs):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = kwargs


class SetupError(RpcCompareError):
    """Invalid configuration detected before any test runs."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.SETUP, ErrorSeverity.CRITICAL, **kwargs)


class ArchiveError(RpcCompareError):
    """Chain archive could not be read."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.ARCHIVE, ErrorSeverity.HIGH, **kwargs)


class GenerationError(RpcCompareError):
    """Dynamic test generation aborted."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.GENERATION, ErrorSeverity.CRITICAL, **kwargs)


class TestRunFailure(RpcCompareError):
    """At least one comparison ended in the failure bucket."""

    __test__ = False

    def __init__(self, message: str, failed: int = 0, **kwargs):
        super().__init__(message, ErrorCategory.TEST_RUN, ErrorSeverity.HIGH, failed=failed, **kwargs)
        self.failed = failed
