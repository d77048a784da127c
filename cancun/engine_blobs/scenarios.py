"""
Engine API blob scenarios.

Each scenario is a `BlobsBaseSpec` built for the fork under test: blob counts derive
from the target and maximum blobs per block of the fork, so the same table runs on
every fork with blobs.
"""

from typing import List

from blob_test_forks import Fork
from blob_test_steps import (
    BlobsBaseSpec,
    CustomPayloadData,
    LaunchClients,
    NewPayloads,
    SendBlobTransactions,
    SendModifiedLatestPayload,
)
from blob_test_types import CorruptionMode, VersionedHashes

from .spec import Spec, SpecHelpers

CORRUPTION_NAMES = {
    CorruptionMode.MISSING: "Missing Hash",
    CorruptionMode.EXTRA: "Extra Hash",
    CorruptionMode.OUT_OF_ORDER: "Out of Order",
    CorruptionMode.REPEATED: "Repeated Hash",
    CorruptionMode.INCORRECT_HASH: "Incorrect Hash",
    CorruptionMode.INCORRECT_VERSION: "Incorrect Version",
    CorruptionMode.NIL: "Nil Hashes",
    CorruptionMode.EMPTY: "Empty Hashes",
}


def capacity_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """Blob inclusion on the first block and across a blob gas price increase."""
    target = fork.target_blobs_per_block()
    max_blobs = fork.max_blobs_per_block()
    full_payloads = SpecHelpers.get_full_payloads_to_blob_gas_price(fork=fork, blob_gas_price=2)
    return [
        BlobsBaseSpec(
            name=f"Blob Transactions On Block 1, {fork} Genesis",
            about=f"Tests the {fork} fork since genesis.",
            steps=[
                SendBlobTransactions(transaction_count=target, max_blob_gas_cost=1),
                NewPayloads(
                    expected_included_blob_count=target,
                    expected_blobs=list(range(target)),
                ),
                # Full payloads raise the blob gas price above what the last one pays.
                SendBlobTransactions(
                    transaction_count=full_payloads + 1,
                    blobs_per_transaction=max_blobs,
                    max_blob_gas_cost=1,
                ),
                NewPayloads(payload_count=full_payloads, expected_included_blob_count=max_blobs),
                NewPayloads(expected_included_blob_count=0),
                NewPayloads(expected_included_blob_count=max_blobs),
            ],
        ),
    ]


def ordering_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """Order of inclusion of blob transactions competing for the same payloads."""
    max_blobs = fork.max_blobs_per_block()
    return [
        BlobsBaseSpec(
            name="Blob Transaction Ordering, Single Account",
            about=(
                "Send blob transactions with MAX_BLOBS_PER_BLOCK-1 blobs each, then "
                "single-blob transactions, from the same account. Payloads include them "
                "in nonce order."
            ),
            steps=[
                SendBlobTransactions(
                    transaction_count=5,
                    blobs_per_transaction=max_blobs - 1,
                    max_blob_gas_cost=100,
                ),
                SendBlobTransactions(transaction_count=5, max_blob_gas_cost=100),
                NewPayloads(payload_count=4, expected_included_blob_count=max_blobs - 1),
                NewPayloads(expected_included_blob_count=max_blobs),
                NewPayloads(expected_included_blob_count=4),
            ],
        ),
        BlobsBaseSpec(
            name="Blob Transaction Ordering, Multiple Accounts",
            about=(
                "Send blob transactions with MAX_BLOBS_PER_BLOCK-1 blobs each from account "
                "A and single-blob transactions from account B. All payloads are full."
            ),
            steps=[
                SendBlobTransactions(
                    transaction_count=5,
                    blobs_per_transaction=max_blobs - 1,
                    max_blob_gas_cost=100,
                    account_index=0,
                ),
                SendBlobTransactions(
                    transaction_count=5, max_blob_gas_cost=100, account_index=1
                ),
                NewPayloads(payload_count=5, expected_included_blob_count=max_blobs),
            ],
        ),
        BlobsBaseSpec(
            name="Blob Transaction Ordering, Multiple Clients",
            about=(
                "Send blob transactions with MAX_BLOBS_PER_BLOCK-1 blobs each from account "
                "A to client A and single-blob transactions from account B to client B. "
                "All payloads, built by client A, are full."
            ),
            steps=[
                # Client B stays out of the CL mock so that every payload is built by A.
                LaunchClients(skip_adding_to_clmock=True),
                NewPayloads(expected_included_blob_count=0),
                SendBlobTransactions(
                    transaction_count=5,
                    blobs_per_transaction=max_blobs - 1,
                    max_blob_gas_cost=100,
                    account_index=0,
                    client_index=0,
                ),
                SendBlobTransactions(
                    transaction_count=5,
                    max_blob_gas_cost=100,
                    account_index=1,
                    client_index=1,
                ),
                NewPayloads(
                    payload_count=5,
                    expected_included_blob_count=max_blobs,
                    get_payload_delay=2,
                ),
            ],
        ),
        BlobsBaseSpec(
            name="Replace Blob Transactions",
            about=(
                "Send blob transactions with the same nonce and increasing tips. Only the "
                "last one is included."
            ),
            steps=[
                SendBlobTransactions(max_blob_gas_cost=1, gas_fee_cap=10**9, gas_tip_cap=10**9),
                *[
                    SendBlobTransactions(
                        max_blob_gas_cost=1, gas_fee_cap=fee, gas_tip_cap=fee, replace=True
                    )
                    for fee in (10**10, 10**11, 10**12)
                ],
                NewPayloads(expected_included_blob_count=1, expected_blobs=[3]),
            ],
        ),
    ]


def versioned_hashes_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """Payloads sent with a versioned hash list that differs from their blobs."""
    method = f"NewPayloadV{fork.engine_new_payload_version()}"
    tx_count = Spec.VERSIONED_HASH_TRANSACTION_COUNT
    included = list(range(tx_count))
    scenarios: List[BlobsBaseSpec] = []

    for mode, label in CORRUPTION_NAMES.items():
        versioned_hashes = VersionedHashes.from_corruption(mode, included, tx_count)
        scenarios.append(
            BlobsBaseSpec(
                name=f"{method} Versioned Hashes, {label}",
                about=f"Send {method} with versioned hashes {versioned_hashes}.",
                steps=[
                    SendBlobTransactions(transaction_count=tx_count, max_blob_gas_cost=1),
                    NewPayloads(
                        expected_included_blob_count=tx_count,
                        expected_blobs=included,
                        versioned_hashes=versioned_hashes,
                    ),
                ],
            )
        )
    scenarios.append(
        BlobsBaseSpec(
            name=f"{method} Versioned Hashes, Non-Empty Hashes",
            about=f"Send {method} with versioned hashes for a payload without blobs.",
            steps=[
                NewPayloads(
                    expected_included_blob_count=0,
                    expected_blobs=[],
                    versioned_hashes=VersionedHashes(blobs=included),
                ),
            ],
        )
    )

    # The second client never gets the parent of the payload, so it must reject the
    # hash list before trying to sync.
    syncing_client = LaunchClients(skip_adding_to_clmock=True, skip_connecting_to_bootnode=True)
    for mode, label in CORRUPTION_NAMES.items():
        versioned_hashes = VersionedHashes.from_corruption(mode, included, tx_count)
        scenarios.append(
            BlobsBaseSpec(
                name=f"{method} Versioned Hashes, {label} (Syncing)",
                about=(
                    f"Send {method} with versioned hashes {versioned_hashes} to a syncing "
                    "client."
                ),
                steps=[
                    NewPayloads(),
                    SendBlobTransactions(transaction_count=tx_count, max_blob_gas_cost=1),
                    NewPayloads(expected_included_blob_count=tx_count, expected_blobs=included),
                    syncing_client,
                    SendModifiedLatestPayload(client_index=1, versioned_hashes=versioned_hashes),
                ],
            )
        )
    scenarios.append(
        BlobsBaseSpec(
            name=f"{method} Versioned Hashes, Non-Empty Hashes (Syncing)",
            about=(
                f"Send {method} with versioned hashes for a payload without blobs to a "
                "syncing client."
            ),
            steps=[
                NewPayloads(),
                NewPayloads(expected_included_blob_count=0, expected_blobs=[]),
                syncing_client,
                SendModifiedLatestPayload(
                    client_index=1, versioned_hashes=VersionedHashes(blobs=included)
                ),
            ],
        )
    )
    return scenarios


def blob_gas_used_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """Payloads without blobs whose header claims blob gas."""
    return [
        BlobsBaseSpec(
            name=f"Incorrect BlobGasUsed: {label} on Zero Blobs",
            about="Send a payload with zero blobs, but non-zero blob gas used.",
            steps=[
                NewPayloads(
                    expected_included_blob_count=0,
                    payload_customizer=CustomPayloadData(blob_gas_used=blob_gas_used),
                ),
            ],
        )
        for label, blob_gas_used in (
            ("Non-Zero", 1),
            ("GAS_PER_BLOB", fork.blob_gas_per_blob()),
        )
    ]


def fork_transition_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """
    Blob inclusion right after the activation of the fork.

    Clients reject blob transactions while the head predates the fork. The transactions
    are sent once block 2, the first block of the fork, is the head, and land in block 3.
    """
    return [
        BlobsBaseSpec(
            name=f"Blob Transactions After {fork} Activation",
            about=f"Tests blob transactions in the block following the first block of {fork}.",
            blobs_fork_height=2,
            steps=[
                NewPayloads(payload_count=2, expected_included_blob_count=0),
                SendBlobTransactions(transaction_count=2, max_blob_gas_cost=1),
                NewPayloads(expected_included_blob_count=2, expected_blobs=[0, 1]),
            ],
        ),
    ]


def blob_scenarios(fork: Fork) -> List[BlobsBaseSpec]:
    """Return every blob scenario for the fork."""
    return (
        capacity_scenarios(fork)
        + ordering_scenarios(fork)
        + versioned_hashes_scenarios(fork)
        + blob_gas_used_scenarios(fork)
        + fork_transition_scenarios(fork)
    )
