"""Test blob transactions and accounts."""

import ethereum_rlp as eth_rlp
import pytest

from blob_test_base_types import Address, TestPrivateKey

from ..account_types import EOA
from ..blob_types import BlobGenerator
from ..transaction_types import BlobTransaction, NetworkWrappedTransaction


@pytest.fixture
def sender() -> EOA:
    """Return the default test account."""
    return EOA(key=TestPrivateKey)


@pytest.fixture
def blob_tx(sender: EOA) -> BlobTransaction:
    """Return a two-blob transaction."""
    generator = BlobGenerator()
    blobs = generator.blobs([0, 1])
    return BlobTransaction(
        nonce=sender.get_nonce(),
        max_priority_fee_per_gas=10**9,
        max_fee_per_gas=30 * 10**9,
        max_fee_per_blob_gas=1,
        blob_versioned_hashes=[blob.versioned_hash() for blob in blobs],
        blobs=blobs,
        sender=sender,
    )


def test_eoa_address(sender: EOA):
    """Test the address derived from the test private key."""
    assert sender == Address("0xa94f5374fce5edbc8e2a8697c15331677e6ebf0b")


def test_eoa_nonce_tracking(sender: EOA):
    """Test nonce advancement and the nonce reused by replacements."""
    with pytest.raises(ValueError):
        sender.previous_nonce()
    assert sender.get_nonce() == 0
    assert sender.get_nonce() == 1
    assert sender.previous_nonce() == 1
    assert sender.nonce == 2
    assert sender.copy().nonce == 2


def test_eoa_requires_address_or_key():
    """Test that an EOA cannot be built from nothing."""
    with pytest.raises(ValueError):
        EOA()


def test_blob_transaction_signature(blob_tx: BlobTransaction, sender: EOA):
    """Test signing and sender recovery."""
    raw = blob_tx.rlp()
    assert raw[0] == 3
    assert blob_tx.signed
    assert blob_tx.recover_sender() == sender
    assert blob_tx.hash == raw.keccak256()
    decoded = eth_rlp.decode(raw[1:])
    assert isinstance(decoded, list)
    assert len(decoded) == 14


def test_blob_transaction_properties(blob_tx: BlobTransaction):
    """Test the blob accounting helpers."""
    assert blob_tx.blob_count == 2
    assert blob_tx.blob_ids == [0, 1]
    assert blob_tx.blob_gas(2**17) == 2 * 2**17


def test_blob_transaction_json(blob_tx: BlobTransaction):
    """Test the JSON-RPC rendering of the transaction."""
    blob_tx.sign()
    json = blob_tx.serialize(mode="json", by_alias=True)
    assert json["type"] == "0x3"
    assert json["gas"] == hex(100_000)
    assert json["maxFeePerBlobGas"] == "0x1"
    assert json["input"] == "0x"
    assert "sender" not in json
    assert "blobs" not in json


def test_blob_transaction_requires_hashes(sender: EOA):
    """Test that a blob transaction without versioned hashes is refused."""
    with pytest.raises(ValueError):
        BlobTransaction(
            max_priority_fee_per_gas=1,
            max_fee_per_gas=1,
            max_fee_per_blob_gas=1,
            blob_versioned_hashes=[],
            sender=sender,
        )


def test_network_wrapped_transaction(blob_tx: BlobTransaction):
    """Test the network form of the transaction."""
    wrapped = NetworkWrappedTransaction(tx=blob_tx)
    raw = wrapped.rlp()
    assert raw[0] == 3
    decoded = eth_rlp.decode(raw[1:])
    assert isinstance(decoded, list)
    tx_fields, blob_data, commitments, proofs = decoded
    assert len(tx_fields) == 14
    assert [bytes(b) for b in blob_data] == [blob.data for blob in blob_tx.blobs]
    assert len(commitments) == len(proofs) == 2


def test_network_wrapped_transaction_requires_blobs(sender: EOA):
    """Test that a transaction without its blobs cannot be wrapped."""
    tx = BlobTransaction(
        max_priority_fee_per_gas=1,
        max_fee_per_gas=1,
        max_fee_per_blob_gas=1,
        blob_versioned_hashes=[BlobGenerator().versioned_hash(0)],
        sender=sender,
    )
    with pytest.raises(ValueError):
        NetworkWrappedTransaction(tx=tx)
