"""Steps of the blob test cases and the engine that runs them."""

from .context import BlobTestContext, ClientLauncher
from .customizer import CustomPayloadData
from .exceptions import (
    BlobMismatchError,
    BlobSubmissionError,
    BlobTestError,
    BlobTestTimeoutError,
    InvalidStepError,
    UnexpectedStatusError,
    ValueMismatchError,
    translate_error,
)
from .factory import build_blob_transaction, send_blob_transactions
from .inclusion import InclusionModel
from .payloads import (
    ExpectedPayloadStatus,
    PayloadRound,
    PayloadState,
    expected_payload_status,
    send_modified_latest_payload,
    submit_payload,
)
from .pool import TestBlobTxPool
from .sequence import BlobsBaseSpec
from .steps import (
    LaunchClients,
    NewPayloads,
    SendBlobTransactions,
    SendModifiedLatestPayload,
    TestStep,
    describe,
    execute,
)
from .verify import bundle_blob_ids, verify_blobs_bundle, verify_transaction

__all__ = (
    "BlobMismatchError",
    "BlobSubmissionError",
    "BlobTestContext",
    "BlobTestError",
    "BlobTestTimeoutError",
    "BlobsBaseSpec",
    "ClientLauncher",
    "CustomPayloadData",
    "ExpectedPayloadStatus",
    "InclusionModel",
    "InvalidStepError",
    "LaunchClients",
    "NewPayloads",
    "PayloadRound",
    "PayloadState",
    "SendBlobTransactions",
    "SendModifiedLatestPayload",
    "TestBlobTxPool",
    "TestStep",
    "UnexpectedStatusError",
    "ValueMismatchError",
    "build_blob_transaction",
    "bundle_blob_ids",
    "describe",
    "execute",
    "expected_payload_status",
    "send_blob_transactions",
    "send_modified_latest_payload",
    "submit_payload",
    "translate_error",
    "verify_blobs_bundle",
    "verify_transaction",
)
