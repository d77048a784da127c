"""
Production and validation of payloads, and submission of modified payloads.

Each produced payload goes through the states of `PayloadState`:

- `REQUESTED`: the CL mock asked the producing client to build a payload;
- `PRODUCED`: the payload and its blobs bundle were retrieved and checked against the
  expectation, and the modified payload, if any, was sent to the producer;
- `VALIDATED`: the canonical payload was broadcast and became the head.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from blob_test_base_types import Bytes, Hash
from blob_test_clmock import CLMock, EngineClient, new_payload_params
from blob_test_forks import Fork
from blob_test_rpc import (
    EngineAPIError,
    ExecutionPayload,
    GetPayloadResponse,
    JSONRPCError,
    PayloadStatusEnum,
)
from blob_test_types import BlobID, BlobTransaction, VersionedHashes, keccak256
from pytest_plugins.logging import get_logger

from .context import BlobTestContext
from .customizer import CustomPayloadData
from .exceptions import InvalidStepError, UnexpectedStatusError, ValueMismatchError
from .verify import verify_blobs_bundle

logger = get_logger(__name__)

ExpectedPayloadStatus = PayloadStatusEnum | EngineAPIError


class PayloadState(Enum):
    """States of the production of one payload."""

    IDLE = "idle"
    REQUESTED = "requested"
    PRODUCED = "produced"
    VALIDATED = "validated"


def expected_payload_status(
    rendered_hashes: List[Hash] | None,
    canonical_hashes: List[Hash],
    customized: bool,
    expected_status: ExpectedPayloadStatus | None = None,
) -> ExpectedPayloadStatus:
    """
    Return the answer a client must give to a modified payload.

    A nil hash list is malformed for the fork and must fail with `InvalidParams`. Any
    other list different from the canonical one, or any customized payload, must be
    `INVALID`. An explicit `expected_status` takes precedence.
    """
    if expected_status is not None:
        return expected_status
    if rendered_hashes is None:
        return EngineAPIError.InvalidParams
    if customized or rendered_hashes != canonical_hashes:
        return PayloadStatusEnum.INVALID
    return PayloadStatusEnum.VALID


def submit_payload(
    client: EngineClient,
    fork: Fork,
    payload: ExecutionPayload,
    versioned_hashes: List[Hash] | None,
    parent_beacon_block_root: Hash | None,
    execution_requests: List[Bytes] | None,
    expected: ExpectedPayloadStatus,
) -> None:
    """Send a payload through `engine_newPayloadVX` and check the answer of the client."""
    version = fork.engine_new_payload_version()
    assert version is not None, f"{fork} does not support engine_newPayload"
    params = new_payload_params(
        fork, payload, versioned_hashes, parent_beacon_block_root, execution_requests
    )
    what = f"engine_newPayloadV{version} of {payload.block_hash} to {client}"
    try:
        status = client.engine.new_payload(*params, version=version)
    except JSONRPCError as e:
        logger.verbose(f"{what}: error {e.code} - {e.message}")
        if expected != e.code:
            raise UnexpectedStatusError(what, expected, f"error {e.code} ({e.message})") from e
        return
    logger.verbose(f"{what}: {status.status} ({status.validation_error})")
    if isinstance(expected, EngineAPIError) or status.status != expected:
        raise UnexpectedStatusError(what, expected, status.status)


@dataclass
class PayloadRound:
    """
    One payload produced by the CL mock, checked against the expected blob inclusion.

    When neither `expected_blob_count` nor `expected_blobs` is given, both follow the
    prediction of the inclusion model.
    """

    ctx: BlobTestContext
    expected_blob_count: int | None = None
    expected_blobs: List[BlobID] | None = None
    versioned_hashes: VersionedHashes | None = None
    payload_customizer: CustomPayloadData | None = None
    get_payload_delay: float | None = None

    state: PayloadState = PayloadState.IDLE
    predicted: List[BlobTransaction] = field(default_factory=list)
    fork: Fork | None = None

    def _transition(self, state: PayloadState) -> None:
        logger.debug(f"Payload round: {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> ExecutionPayload:
        """Produce the payload and validate it."""
        assert self.state == PayloadState.IDLE, "a payload round runs once"
        clmock = self.ctx.clmock
        self.fork = clmock.next_payload_fork()
        self.predicted = self.ctx.inclusion.next_payload(self.fork)
        self._transition(PayloadState.REQUESTED)
        payload = clmock.produce_single_block(
            on_get_payload=self.on_get_payload,
            on_new_payload_broadcast=self.on_new_payload_broadcast,
            get_payload_delay=self.get_payload_delay,
        )
        assert self.state == PayloadState.VALIDATED
        return payload

    def on_get_payload(
        self, clmock: CLMock, producer: EngineClient, response: GetPayloadResponse
    ) -> None:
        """Check the built payload and send the modified payload to its producer."""
        assert self.fork is not None
        self._transition(PayloadState.PRODUCED)
        payload = response.execution_payload
        bundle = response.blobs_bundle

        blob_ids = verify_blobs_bundle(
            bundle, payload.transactions, self.ctx.pool, self.ctx.blob_generator
        )
        expected_count = self.expected_blob_count
        if expected_count is None:
            expected_count = (
                len(self.expected_blobs)
                if self.expected_blobs is not None
                else sum(tx.blob_count for tx in self.predicted)
            )
        if len(blob_ids) != expected_count:
            raise ValueMismatchError(
                f"included blob count of payload {payload.number}", expected_count, len(blob_ids)
            )

        expected_blobs = self.expected_blobs
        if expected_blobs is None and self.expected_blob_count is None:
            expected_blobs = [blob_id for tx in self.predicted for blob_id in tx.blob_ids]
        if expected_blobs is not None and blob_ids != list(expected_blobs):
            raise ValueMismatchError(
                f"blobs of payload {payload.number}", list(expected_blobs), blob_ids
            )

        if self.fork.header_blob_fields_required():
            expected_blob_gas_used = expected_count * self.fork.blob_gas_per_blob()
            if payload.blob_gas_used != expected_blob_gas_used:
                raise ValueMismatchError(
                    f"blob gas used of payload {payload.number}",
                    expected_blob_gas_used,
                    payload.blob_gas_used,
                )

        if self.versioned_hashes is not None or self.payload_customizer is not None:
            self.submit_modified_payload(clmock, producer, response)

    def submit_modified_payload(
        self, clmock: CLMock, producer: EngineClient, response: GetPayloadResponse
    ) -> None:
        """Send the payload with its modified hash list or fields to its producer."""
        assert self.fork is not None
        bundle = response.blobs_bundle
        canonical = bundle.blob_versioned_hashes() if bundle is not None else []
        rendered: List[Hash] | None = canonical
        if self.versioned_hashes is not None:
            rendered = self.versioned_hashes.render(self.ctx.blob_generator)
        payload = response.execution_payload
        parent_beacon_block_root = clmock.latest_parent_beacon_block_root
        if self.payload_customizer is not None:
            payload, parent_beacon_block_root = self.payload_customizer.apply(
                payload, parent_beacon_block_root, response.execution_requests
            )
        submit_payload(
            producer,
            self.fork,
            payload,
            rendered,
            parent_beacon_block_root,
            response.execution_requests,
            expected_payload_status(rendered, canonical, self.payload_customizer is not None),
        )

    def on_new_payload_broadcast(self, clmock: CLMock, payload: ExecutionPayload) -> None:
        """Account the canonical payload in the inclusion model."""
        included = [
            tx
            for raw_tx in payload.transactions
            if (tx := self.ctx.pool.lookup(keccak256(raw_tx))) is not None
        ]
        self.ctx.inclusion.apply_payload(
            included,
            excess_blob_gas=payload.excess_blob_gas,
            blob_gas_used=payload.blob_gas_used,
        )
        self._transition(PayloadState.VALIDATED)


def send_modified_latest_payload(
    ctx: BlobTestContext,
    *,
    client_index: int,
    versioned_hashes: VersionedHashes | None = None,
    payload_customizer: CustomPayloadData | None = None,
    expected_status: ExpectedPayloadStatus | None = None,
) -> None:
    """Re-send the latest produced payload, modified, to one client."""
    clmock = ctx.clmock
    payload = clmock.latest_payload
    if payload is None:
        raise InvalidStepError("no payload was produced yet")
    fork = clmock.fork_at(payload.timestamp)
    bundle = clmock.latest_blobs_bundle
    canonical = bundle.blob_versioned_hashes() if bundle is not None else []
    rendered: List[Hash] | None = canonical
    if versioned_hashes is not None:
        rendered = versioned_hashes.render(ctx.blob_generator)
    parent_beacon_block_root = clmock.latest_parent_beacon_block_root
    if payload_customizer is not None:
        payload, parent_beacon_block_root = payload_customizer.apply(
            payload, parent_beacon_block_root, clmock.latest_execution_requests
        )
    submit_payload(
        ctx.client(client_index),
        fork,
        payload,
        rendered,
        parent_beacon_block_root,
        clmock.latest_execution_requests,
        expected_payload_status(
            rendered, canonical, payload_customizer is not None, expected_status
        ),
    )
