"""Block-related types for the blob tests."""

from hashlib import sha256
from typing import Any, ClassVar, List, Sequence

import ethereum_rlp as eth_rlp
from ethereum_types.numeric import Uint
from pydantic import Field
from trie import HexaryTrie

from blob_test_base_types import (
    Address,
    Bloom,
    Bytes,
    CamelModel,
    EmptyOmmersRoot,
    Hash,
    HeaderNonce,
    HexNumber,
    RLPSerializable,
    ZeroPaddedHexNumber,
)


class Withdrawal(CamelModel):
    """Withdrawal included in an execution payload."""

    index: HexNumber
    validator_index: HexNumber
    address: Address
    amount: HexNumber

    def to_serializable_list(self) -> List[Any]:
        """
        Return list of the withdrawal's attributes in the order they should
        be serialized.
        """
        return [
            Uint(self.index),
            Uint(self.validator_index),
            self.address,
            Uint(self.amount),
        ]

    @staticmethod
    def list_root(withdrawals: Sequence["Withdrawal"]) -> Hash:
        """Return withdrawals root of a list of withdrawals."""
        t = HexaryTrie(db={})
        for i, w in enumerate(withdrawals):
            t.set(eth_rlp.encode(Uint(i)), eth_rlp.encode(w.to_serializable_list()))
        return Hash(t.root_hash)


def transactions_root(raw_transactions: Sequence[bytes]) -> Hash:
    """Return the root of the trie of the encoded transactions of a block."""
    t = HexaryTrie(db={})
    for i, tx in enumerate(raw_transactions):
        t.set(eth_rlp.encode(Uint(i)), bytes(tx))
    return Hash(t.root_hash)


def requests_hash(requests: Sequence[bytes]) -> Hash:
    """
    Return the commitment to the execution requests of a block
    ([EIP-7685](https://eips.ethereum.org/EIPS/eip-7685)).

    Requests with a type byte and no data are not committed to.
    """
    m = sha256()
    for request in requests:
        if len(request) > 1:
            m.update(sha256(request).digest())
    return Hash(m.digest())


class BlockHeader(CamelModel, RLPSerializable):
    """
    Execution block header.

    Fields introduced by later forks are `None` when the fork of the block does not
    define them, and are then left out of the serialization.
    """

    parent_hash: Hash
    ommers_hash: Hash = Field(Hash(EmptyOmmersRoot))
    fee_recipient: Address
    state_root: Hash
    transactions_trie: Hash
    receipts_root: Hash
    logs_bloom: Bloom
    difficulty: ZeroPaddedHexNumber = Field(ZeroPaddedHexNumber(0))
    number: ZeroPaddedHexNumber
    gas_limit: ZeroPaddedHexNumber
    gas_used: ZeroPaddedHexNumber
    timestamp: ZeroPaddedHexNumber
    extra_data: Bytes
    prev_randao: Hash
    nonce: HeaderNonce = Field(HeaderNonce(0))
    base_fee_per_gas: ZeroPaddedHexNumber | None = None
    withdrawals_root: Hash | None = None
    blob_gas_used: ZeroPaddedHexNumber | None = None
    excess_blob_gas: ZeroPaddedHexNumber | None = None
    parent_beacon_block_root: Hash | None = None
    requests_hash: Hash | None = None

    optional_rlp_fields: ClassVar[List[str]] = [
        "base_fee_per_gas",
        "withdrawals_root",
        "blob_gas_used",
        "excess_blob_gas",
        "parent_beacon_block_root",
        "requests_hash",
    ]
    rlp_fields: ClassVar[List[str]] = [
        "parent_hash",
        "ommers_hash",
        "fee_recipient",
        "state_root",
        "transactions_trie",
        "receipts_root",
        "logs_bloom",
        "difficulty",
        "number",
        "gas_limit",
        "gas_used",
        "timestamp",
        "extra_data",
        "prev_randao",
        "nonce",
    ] + optional_rlp_fields

    def get_rlp_fields(self) -> List[str]:
        """Return the header fields, stopping at the first field the fork does not define."""
        fields = self.rlp_fields[: -len(self.optional_rlp_fields)]
        for field in self.optional_rlp_fields:
            if getattr(self, field) is None:
                break
            fields.append(field)
        return fields

    @property
    def block_hash(self) -> Hash:
        """Return the keccak256 of the serialized header."""
        return self.rlp().keccak256()
