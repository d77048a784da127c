"""
The steps a blob test case is made of.

`TestStep` is a closed union: `describe` and `execute` switch over every variant, and a
new kind of step is added to both.
"""

from dataclasses import dataclass
from typing import List, Union

from blob_test_types import BlobID, VersionedHashes
from pytest_plugins.logging import get_logger

from .context import BlobTestContext
from .customizer import CustomPayloadData
from .factory import send_blob_transactions
from .payloads import ExpectedPayloadStatus, PayloadRound, send_modified_latest_payload

logger = get_logger(__name__)


@dataclass(frozen=True)
class SendBlobTransactions:
    """Send blob transactions from one account to one client."""

    transaction_count: int = 1
    blobs_per_transaction: int = 1
    max_blob_gas_cost: int | None = None
    gas_fee_cap: int | None = None
    gas_tip_cap: int | None = None
    replace: bool = False
    account_index: int = 0
    client_index: int = 0

    def __post_init__(self):
        """Reject transactions that could not carry a blob."""
        if self.blobs_per_transaction < 1:
            raise ValueError(
                f"blobs_per_transaction must be at least 1, not {self.blobs_per_transaction}"
            )


@dataclass(frozen=True)
class NewPayloads:
    """Produce payloads and check the blobs they include."""

    payload_count: int = 1
    expected_included_blob_count: int | None = None
    expected_blobs: List[BlobID] | None = None
    versioned_hashes: VersionedHashes | None = None
    payload_customizer: CustomPayloadData | None = None
    get_payload_delay: float | None = None


@dataclass(frozen=True)
class LaunchClients:
    """Start more clients with the genesis of the test case."""

    client_count: int = 1
    skip_adding_to_clmock: bool = False
    skip_connecting_to_bootnode: bool = False


@dataclass(frozen=True)
class SendModifiedLatestPayload:
    """Re-send the latest payload, modified, to one client and check its answer."""

    client_index: int = 0
    versioned_hashes: VersionedHashes | None = None
    payload_customizer: CustomPayloadData | None = None
    expected_status: ExpectedPayloadStatus | None = None


TestStep = Union[SendBlobTransactions, NewPayloads, LaunchClients, SendModifiedLatestPayload]


def describe(step: TestStep) -> str:
    """Return a one-line description of the step for the logs."""
    match step:
        case SendBlobTransactions():
            description = (
                f"Send {step.transaction_count} blob transactions with "
                f"{step.blobs_per_transaction} blobs each from account {step.account_index} "
                f"to client {step.client_index}"
            )
            if step.max_blob_gas_cost is not None:
                description += f", max blob gas cost {step.max_blob_gas_cost}"
            if step.replace:
                description += ", replacing the previous transaction"
            return description
        case NewPayloads():
            if step.expected_included_blob_count is not None:
                expected = f"{step.expected_included_blob_count} blobs"
            elif step.expected_blobs is not None:
                expected = f"blobs {list(step.expected_blobs)}"
            else:
                expected = "the predicted blobs"
            description = f"Produce {step.payload_count} payloads with {expected}"
            if step.versioned_hashes is not None:
                description += f", sending versioned hashes {step.versioned_hashes}"
            if step.payload_customizer is not None:
                description += f", customized with {step.payload_customizer}"
            return description
        case LaunchClients():
            description = f"Launch {step.client_count} clients"
            if step.skip_adding_to_clmock:
                description += " outside the CL mock"
            if step.skip_connecting_to_bootnode:
                description += " without bootnode"
            return description
        case SendModifiedLatestPayload():
            description = f"Send the latest payload to client {step.client_index}"
            if step.versioned_hashes is not None:
                description += f" with versioned hashes {step.versioned_hashes}"
            if step.payload_customizer is not None:
                description += f" customized with {step.payload_customizer}"
            if step.expected_status is not None:
                description += f", expecting {step.expected_status.name}"
            return description
    raise TypeError(f"unknown step {step!r}")


def execute(step: TestStep, ctx: BlobTestContext) -> None:
    """Run the step against the context."""
    match step:
        case SendBlobTransactions():
            send_blob_transactions(
                ctx,
                transaction_count=step.transaction_count,
                blobs_per_transaction=step.blobs_per_transaction,
                max_blob_gas_cost=step.max_blob_gas_cost,
                gas_fee_cap=step.gas_fee_cap,
                gas_tip_cap=step.gas_tip_cap,
                replace=step.replace,
                account_index=step.account_index,
                client_index=step.client_index,
            )
        case NewPayloads():
            for index in range(step.payload_count):
                payload = PayloadRound(
                    ctx,
                    expected_blob_count=step.expected_included_blob_count,
                    expected_blobs=step.expected_blobs,
                    versioned_hashes=step.versioned_hashes,
                    payload_customizer=step.payload_customizer,
                    get_payload_delay=step.get_payload_delay,
                ).run()
                logger.verbose(
                    f"Payload {index + 1}/{step.payload_count}: block {payload.number} "
                    f"({payload.block_hash})"
                )
        case LaunchClients():
            for _ in range(step.client_count):
                client = ctx.launch_client(
                    connect_to_bootnode=not step.skip_connecting_to_bootnode
                )
                if not step.skip_adding_to_clmock:
                    ctx.clmock.sync_client(client, ctx.sync_timeout)
                    ctx.clmock.add_client(client)
        case SendModifiedLatestPayload():
            send_modified_latest_payload(
                ctx,
                client_index=step.client_index,
                versioned_hashes=step.versioned_hashes,
                payload_customizer=step.payload_customizer,
                expected_status=step.expected_status,
            )
        case _:
            raise TypeError(f"unknown step {step!r}")
