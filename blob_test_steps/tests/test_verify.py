"""
Test the checks of transactions and blobs bundles reported by the clients.
"""

from unittest.mock import MagicMock

import pytest

from blob_test_base_types import TestPrivateKey
from blob_test_rpc import BlobsBundle
from blob_test_types import EOA, BlobGenerator, BlobTransaction

from ..exceptions import ValueMismatchError
from ..pool import TestBlobTxPool
from ..verify import (
    bundle_blob_ids,
    verify_blobs_bundle,
    verify_transaction,
    verify_transaction_from_node,
)

GAS_PER_BLOB = 2**17


@pytest.fixture
def generator() -> BlobGenerator:
    """Blob generator with stand-in commitments."""
    return BlobGenerator()


def make_tx(generator: BlobGenerator, nonce: int, blob_ids) -> BlobTransaction:
    """Return a signed transaction carrying the given blobs."""
    blobs = generator.blobs(blob_ids)
    tx = BlobTransaction(
        nonce=nonce,
        max_priority_fee_per_gas=1,
        max_fee_per_gas=10**9,
        max_fee_per_blob_gas=1,
        blob_versioned_hashes=[blob.versioned_hash() for blob in blobs],
        blobs=blobs,
        sender=EOA(key=TestPrivateKey),
    )
    tx.sign()
    return tx


def make_bundle(generator: BlobGenerator, blob_ids) -> BlobsBundle:
    """Return the bundle of the given blobs."""
    blobs = generator.blobs(blob_ids)
    return BlobsBundle(
        commitments=[blob.commitment for blob in blobs],
        proofs=[blob.proof for blob in blobs],
        blobs=[blob.data for blob in blobs],
    )


def test_verify_transaction_equal(generator: BlobGenerator):
    """A transaction is equal to itself."""
    tx = make_tx(generator, 0, [0, 1])
    verify_transaction(tx, tx.copy(), GAS_PER_BLOB)


@pytest.mark.parametrize(
    "field,value",
    [
        ("nonce", 1),
        ("max_fee_per_blob_gas", 2),
        ("max_priority_fee_per_gas", 2),
        ("gas_limit", 21_000),
    ],
)
def test_verify_transaction_names_field(generator: BlobGenerator, field: str, value: int):
    """A differing field is named in the mismatch."""
    tx = make_tx(generator, 0, [0])
    returned = tx.copy(**{field: value})
    with pytest.raises(ValueMismatchError, match=field):
        verify_transaction(tx, returned, GAS_PER_BLOB)


def test_verify_transaction_unknown_to_node(generator: BlobGenerator):
    """A transaction the client does not know is a mismatch."""
    eth = MagicMock()
    eth.get_transaction_by_hash.return_value = None
    with pytest.raises(ValueMismatchError, match="known to the client"):
        verify_transaction_from_node(eth, make_tx(generator, 0, [0]), GAS_PER_BLOB)


def test_bundle_blob_ids(generator: BlobGenerator):
    """Blob ids are recovered from the commitments in bundle order."""
    assert bundle_blob_ids(make_bundle(generator, [2, 0, 1]), generator) == [2, 0, 1]
    assert bundle_blob_ids(None, generator) == []


def test_bundle_with_unknown_commitment(generator: BlobGenerator):
    """A commitment of a blob the test never generated is a mismatch."""
    bundle = make_bundle(BlobGenerator(), [0])
    bundle.commitments[0] = b"\x01" * 48
    with pytest.raises(ValueMismatchError, match="commitment"):
        bundle_blob_ids(bundle, generator)


def test_verify_blobs_bundle(generator: BlobGenerator):
    """A bundle matching the transactions of its payload passes."""
    pool = TestBlobTxPool()
    txs = [make_tx(generator, 0, [0, 1]), make_tx(generator, 1, [2])]
    for tx in txs:
        pool.add(tx)
    bundle = make_bundle(generator, [0, 1, 2])
    assert verify_blobs_bundle(bundle, [tx.rlp() for tx in txs], pool, generator) == [0, 1, 2]


def test_verify_blobs_bundle_wrong_order(generator: BlobGenerator):
    """Bundle blobs in another order than the transactions are a mismatch."""
    pool = TestBlobTxPool()
    txs = [make_tx(generator, 0, [0]), make_tx(generator, 1, [1])]
    for tx in txs:
        pool.add(tx)
    bundle = make_bundle(generator, [1, 0])
    with pytest.raises(ValueMismatchError, match="versioned hashes"):
        verify_blobs_bundle(bundle, [tx.rlp() for tx in txs], pool, generator)


def test_verify_blobs_bundle_wrong_proof(generator: BlobGenerator):
    """A proof of another blob is a mismatch."""
    pool = TestBlobTxPool()
    tx = make_tx(generator, 0, [0])
    pool.add(tx)
    bundle = make_bundle(generator, [0])
    bundle.proofs[0] = generator.blob(1).proof
    with pytest.raises(ValueMismatchError, match="proof of blob 0"):
        verify_blobs_bundle(bundle, [tx.rlp()], pool, generator)
