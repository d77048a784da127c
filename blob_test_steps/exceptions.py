"""
Failures of the blob test steps.

Lower layers raise `InvalidStepError`, `ValueMismatchError` and `UnexpectedStatusError`, or
the transport and CL mock exceptions. The sequence runner translates them with
`translate_error` into one of the three `BlobTestError` kinds, carrying the index and
description of the failing step.
"""

from typing import Any

import requests
from pydantic import ValidationError

from blob_test_clmock import CLMockError, CLMockTimeoutError
from blob_test_rpc import JSONRPCError, SendTransactionExceptionError
from pytest_plugins.logging import get_logger

logger = get_logger(__name__)


class ValueMismatchError(Exception):
    """A value reported by a client differs from the value computed by the test."""

    def __init__(self, what: str, expected: Any, actual: Any):
        """Initialize the error with the name of the mismatched value and both values."""
        super().__init__(f"{what} mismatch: expected {expected}, got {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class UnexpectedStatusError(Exception):
    """A client accepted what it should have rejected, or the opposite."""

    def __init__(self, what: str, expected: Any, actual: Any):
        """Initialize the error with the call that was answered and both statuses."""
        super().__init__(
            f"unexpected status on {what}: want {getattr(expected, 'name', expected)}, "
            f"got {getattr(actual, 'name', actual)}"
        )
        self.what = what
        self.expected = expected
        self.actual = actual


class InvalidStepError(Exception):
    """A step refers to a client, account, transaction or payload the test case lacks."""

    pass


class BlobTestError(Exception):
    """Exception that uses the logger to log the failure of a test step."""

    step_index: int | None
    step_description: str | None
    expected: Any
    actual: Any

    def __init__(
        self,
        message: str,
        *,
        step_index: int | None = None,
        step_description: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        """Initialize the exception and log the failure."""
        super().__init__(message)
        self.message = message
        self.step_index = step_index
        self.step_description = step_description
        self.expected = expected
        self.actual = actual
        logger.fail(str(self))

    def __str__(self) -> str:
        """Return the failure prefixed by the step that raised it."""
        if self.step_index is None:
            return self.message
        return f"Error executing step {self.step_index} ({self.step_description}): {self.message}"


class BlobSubmissionError(BlobTestError):
    """A transaction or payload was rejected when expected to succeed, or vice versa."""

    pass


class BlobMismatchError(BlobTestError):
    """A retrieved field, count, ordering or hash list differs from the expectation."""

    pass


class BlobTestTimeoutError(BlobTestError):
    """An external wait exceeded its bound."""

    pass


TRANSLATED_ERRORS = (
    InvalidStepError,
    ValueMismatchError,
    UnexpectedStatusError,
    CLMockError,
    SendTransactionExceptionError,
    JSONRPCError,
    ValidationError,
    requests.RequestException,
)


def translate_error(
    error: Exception, step_index: int, step_description: str
) -> BlobTestError:
    """Return the failure of the step that `error` stands for."""
    context: dict[str, Any] = {"step_index": step_index, "step_description": step_description}
    if isinstance(error, ValueMismatchError):
        return BlobMismatchError(
            str(error), expected=error.expected, actual=error.actual, **context
        )
    if isinstance(error, UnexpectedStatusError):
        return BlobSubmissionError(
            str(error), expected=error.expected, actual=error.actual, **context
        )
    if isinstance(error, InvalidStepError):
        return BlobSubmissionError(f"invalid step: {error}", **context)
    if isinstance(error, ValidationError):
        return BlobMismatchError(f"malformed client response: {error}", **context)
    if isinstance(error, (CLMockTimeoutError, requests.Timeout)):
        return BlobTestTimeoutError(f"timeout: {error}", **context)
    return BlobSubmissionError(f"{type(error).__name__}: {error}", **context)
