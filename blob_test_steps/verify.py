"""Checks of the values reported by the clients against the values sent by the test."""

from typing import List, Sequence

from blob_test_base_types import Bytes, Hash
from blob_test_rpc import BlobsBundle, EthRPC
from blob_test_types import BlobGenerator, BlobID, BlobTransaction, keccak256

from .exceptions import ValueMismatchError
from .pool import TestBlobTxPool

VERIFIED_TRANSACTION_FIELDS = (
    "nonce",
    "gas_limit",
    "max_fee_per_gas",
    "max_priority_fee_per_gas",
    "max_fee_per_blob_gas",
    "value",
    "to",
    "data",
    "access_list",
    "chain_id",
    "blob_versioned_hashes",
    "ty",
)


def verify_transaction(
    sent: BlobTransaction, returned: BlobTransaction, blob_gas_per_blob: int
) -> None:
    """
    Compare a transaction reported by a client with the one that was sent, field by field.

    Raises `ValueMismatchError` naming the first field that differs.
    """
    for name in VERIFIED_TRANSACTION_FIELDS:
        expected, actual = getattr(sent, name), getattr(returned, name)
        if expected != actual:
            raise ValueMismatchError(f"transaction {sent.hash} {name}", expected, actual)
    expected_blob_gas = sent.blob_gas(blob_gas_per_blob)
    actual_blob_gas = returned.blob_gas(blob_gas_per_blob)
    if expected_blob_gas != actual_blob_gas:
        raise ValueMismatchError(
            f"transaction {sent.hash} blob gas", expected_blob_gas, actual_blob_gas
        )


def verify_transaction_from_node(
    eth: EthRPC, tx: BlobTransaction, blob_gas_per_blob: int
) -> None:
    """Fetch a sent transaction from a client and compare it with what was sent."""
    returned = eth.get_transaction_by_hash(tx.hash)
    if returned is None:
        raise ValueMismatchError("transaction known to the client", tx.hash, None)
    verify_transaction(tx, returned, blob_gas_per_blob)


def bundle_blob_ids(bundle: BlobsBundle | None, generator: BlobGenerator) -> List[BlobID]:
    """Recover the blob ids of a bundle from its commitments."""
    if bundle is None:
        return []
    blob_ids: List[BlobID] = []
    for index, commitment in enumerate(bundle.commitments):
        blob_id = generator.blob_id_of(commitment)
        if blob_id is None:
            raise ValueMismatchError(
                f"commitment of blob {index} of the bundle", "a blob sent by the test", commitment
            )
        blob_ids.append(blob_id)
    return blob_ids


def verify_blobs_bundle(
    bundle: BlobsBundle | None,
    transactions: Sequence[Bytes],
    pool: TestBlobTxPool,
    generator: BlobGenerator,
) -> List[BlobID]:
    """
    Check a produced blobs bundle against the transactions of its payload.

    Every commitment must belong to a blob sent by the test, along with its blob data and
    proof, and the bundle must list the versioned hashes of the payload's blob
    transactions in order. Return the blob ids of the bundle.
    """
    blob_ids = bundle_blob_ids(bundle, generator)
    if bundle is None:
        return blob_ids

    if not len(bundle.proofs) == len(bundle.blobs) == len(bundle.commitments):
        raise ValueMismatchError(
            "blobs bundle lengths",
            (len(bundle.commitments),) * 3,
            (len(bundle.commitments), len(bundle.proofs), len(bundle.blobs)),
        )
    for blob_id, data, proof in zip(blob_ids, bundle.blobs, bundle.proofs, strict=True):
        blob = generator.blob(blob_id)
        if data != blob.data:
            raise ValueMismatchError(f"data of blob {blob_id}", "generated data", "other data")
        if proof != blob.proof:
            raise ValueMismatchError(f"proof of blob {blob_id}", blob.proof, proof)

    expected_hashes: List[Hash] = []
    for raw_tx in transactions:
        sent = pool.lookup(keccak256(raw_tx))
        if sent is not None:
            expected_hashes.extend(sent.blob_versioned_hashes)
    actual_hashes = bundle.blob_versioned_hashes()
    if expected_hashes != actual_hashes:
        raise ValueMismatchError(
            "versioned hashes of the blobs bundle", expected_hashes, actual_hashes
        )
    return blob_ids
