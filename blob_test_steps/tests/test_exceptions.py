"""
Test the translation of lower layer failures into step failures.
"""

import pytest
import requests

from blob_test_clmock import CLMockError, CLMockTimeoutError
from blob_test_rpc import EngineAPIError, JSONRPCError, PayloadStatusEnum
from pytest_plugins.logging import FAIL_LEVEL

from ..exceptions import (
    BlobMismatchError,
    BlobSubmissionError,
    BlobTestError,
    BlobTestTimeoutError,
    InvalidStepError,
    UnexpectedStatusError,
    ValueMismatchError,
    translate_error,
)


@pytest.mark.parametrize(
    "error,kind",
    [
        (ValueMismatchError("blob count", 2, 1), BlobMismatchError),
        (
            UnexpectedStatusError("newPayload", PayloadStatusEnum.INVALID, "VALID"),
            BlobSubmissionError,
        ),
        (JSONRPCError(EngineAPIError.InvalidParams, "bad"), BlobSubmissionError),
        (CLMockError("no payload id"), BlobSubmissionError),
        (CLMockTimeoutError("genesis"), BlobTestTimeoutError),
        (requests.Timeout("read timed out"), BlobTestTimeoutError),
        (requests.ConnectionError("refused"), BlobSubmissionError),
        (InvalidStepError("no client 3, 1 clients launched"), BlobSubmissionError),
    ],
)
def test_translate_error(error: Exception, kind: type):
    """Every failure maps to one kind of step failure."""
    translated = translate_error(error, 3, "Produce 1 payloads")
    assert type(translated) is kind
    assert translated.step_index == 3
    assert str(translated).startswith("Error executing step 3 (Produce 1 payloads): ")


def test_mismatch_keeps_values():
    """Expected and actual values reach the step failure."""
    translated = translate_error(ValueMismatchError("blob count", 2, 1), 1, "step")
    assert translated.expected == 2
    assert translated.actual == 1
    assert "blob count mismatch: expected 2, got 1" in str(translated)


def test_unexpected_status_message():
    """Statuses are rendered by name."""
    error = UnexpectedStatusError("newPayload", EngineAPIError.InvalidParams, "INVALID")
    assert str(error) == "unexpected status on newPayload: want InvalidParams, got INVALID"


def test_failure_is_logged(caplog: pytest.LogCaptureFixture):
    """Step failures are logged at the FAIL level when raised."""
    with caplog.at_level(FAIL_LEVEL):
        BlobTestError("boom", step_index=1, step_description="step")
    assert any(
        record.levelno == FAIL_LEVEL and "boom" in record.getMessage()
        for record in caplog.records
    )
