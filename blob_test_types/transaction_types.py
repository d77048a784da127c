"""Blob transaction types."""

from functools import cached_property
from typing import Any, ClassVar, List, Literal, Sequence

from coincurve.keys import PrivateKey, PublicKey
from pydantic import ConfigDict, Field, computed_field

from blob_test_base_types import (
    Address,
    BlobTxDestination,
    Bytes,
    CamelModel,
    Hash,
    HexNumber,
    RLPSerializable,
    SignableRLPSerializable,
)

from .account_types import EOA
from .blob_types import Blob, BlobID
from .utils import keccak256

BLOB_TRANSACTION_TYPE = 3


class AccessList(CamelModel, RLPSerializable):
    """Access List for transactions."""

    address: Address
    storage_keys: List[Hash]

    rlp_fields: ClassVar[List[str]] = ["address", "storage_keys"]


class BlobTransaction(CamelModel, SignableRLPSerializable):
    """
    Type 3 transaction carrying one or more blob versioned hashes.

    The blobs themselves travel next to the transaction in a `NetworkWrappedTransaction`
    and are kept here only so that the transaction can be wrapped and identified later.
    """

    ty: HexNumber = Field(HexNumber(BLOB_TRANSACTION_TYPE), alias="type")
    chain_id: HexNumber = Field(HexNumber(1))
    nonce: HexNumber = Field(HexNumber(0))
    max_priority_fee_per_gas: HexNumber
    max_fee_per_gas: HexNumber
    gas_limit: HexNumber = Field(HexNumber(100_000), serialization_alias="gas")
    to: Address = Field(BlobTxDestination)
    value: HexNumber = Field(HexNumber(0))
    data: Bytes = Field(Bytes(b""), alias="input")
    access_list: List[AccessList] = Field(default_factory=list)
    max_fee_per_blob_gas: HexNumber
    blob_versioned_hashes: List[Hash]

    v: HexNumber = Field(HexNumber(0))
    r: HexNumber = Field(HexNumber(0))
    s: HexNumber = Field(HexNumber(0))

    sender: EOA | None = Field(None, exclude=True)
    blobs: List[Blob] = Field(default_factory=list, exclude=True)

    model_config = ConfigDict(validate_assignment=True)

    rlp_signing_fields: ClassVar[List[str]] = [
        "chain_id",
        "nonce",
        "max_priority_fee_per_gas",
        "max_fee_per_gas",
        "gas_limit",
        "to",
        "value",
        "data",
        "access_list",
        "max_fee_per_blob_gas",
        "blob_versioned_hashes",
    ]
    rlp_fields: ClassVar[List[str]] = rlp_signing_fields + ["v", "r", "s"]

    def model_post_init(self, __context: Any) -> None:
        """Check that the blobs are aligned with the versioned hashes."""
        super().model_post_init(__context)
        if not self.blob_versioned_hashes:
            raise ValueError("a blob transaction needs at least one versioned hash")
        if self.blobs and len(self.blobs) != len(self.blob_versioned_hashes):
            raise ValueError(
                f"{len(self.blobs)} blobs for {len(self.blob_versioned_hashes)} versioned hashes"
            )

    @property
    def signed(self) -> bool:
        """Return whether the signature fields are set."""
        return "v" in self.model_fields_set

    def sign(self: "BlobTransaction"):
        """Sign the transaction with the key of its sender."""
        if self.signed:
            return
        assert self.sender is not None and self.sender.key is not None, "sender key must be set"
        signature_bytes = PrivateKey(secret=self.sender.key).sign_recoverable(
            self.rlp_signing_bytes(), hasher=keccak256
        )
        self.v, self.r, self.s = (
            HexNumber(signature_bytes[64]),
            HexNumber(int.from_bytes(signature_bytes[0:32], byteorder="big")),
            HexNumber(int.from_bytes(signature_bytes[32:64], byteorder="big")),
        )
        self.model_fields_set.add("v")
        self.model_fields_set.add("r")
        self.model_fields_set.add("s")

    def recover_sender(self) -> Address:
        """Return the address that produced the signature."""
        assert self.signed, "transaction must be signed"
        signature_bytes = (
            int(self.r).to_bytes(32, byteorder="big")
            + int(self.s).to_bytes(32, byteorder="big")
            + bytes([self.v])
        )
        public_key = PublicKey.from_signature_and_message(
            signature_bytes, self.rlp_signing_bytes().keccak256(), hasher=None
        )
        return Address(keccak256(public_key.format(compressed=False)[1:])[32 - 20 :])

    def get_rlp_prefix(self) -> bytes:
        """Return the transaction type byte."""
        return bytes([self.ty])

    def get_rlp_signing_prefix(self) -> bytes:
        """Return the transaction type byte."""
        return bytes([self.ty])

    @cached_property
    def hash(self) -> Hash:
        """Returns hash of the transaction."""
        return self.rlp().keccak256()

    @property
    def blob_count(self) -> int:
        """Return the number of blobs referenced by the transaction."""
        return len(self.blob_versioned_hashes)

    @property
    def blob_ids(self) -> List[BlobID]:
        """Return the IDs of the attached blobs."""
        return [blob.blob_id for blob in self.blobs]

    def blob_gas(self, blob_gas_per_blob: int) -> int:
        """Return the blob gas consumed by the transaction."""
        return self.blob_count * blob_gas_per_blob


class NetworkWrappedTransaction(CamelModel, RLPSerializable):
    """
    Network wrapped transaction as defined in
    [EIP-4844](https://eips.ethereum.org/EIPS/eip-4844#networking).

    This is the form sent through `eth_sendRawTransaction`.
    """

    tx: BlobTransaction
    wrapper_version: Literal[1] | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def blob_data(self) -> Sequence[Bytes]:
        """Return a list of blobs as bytes."""
        return [blob.data for blob in self.tx.blobs]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def blob_kzg_commitments(self) -> Sequence[Bytes]:
        """Return a list of kzg commitments."""
        return [blob.commitment for blob in self.tx.blobs]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def blob_kzg_proofs(self) -> Sequence[Bytes]:
        """Return a list of kzg proofs."""
        return [blob.proof for blob in self.tx.blobs]

    def model_post_init(self, __context: Any) -> None:
        """Check that the transaction carries its blobs."""
        super().model_post_init(__context)
        if len(self.tx.blobs) != self.tx.blob_count:
            raise ValueError("the wrapped transaction must carry one blob per versioned hash")

    def get_rlp_fields(self) -> List[str]:
        """Return the fields of the wrapper, with the version when set."""
        wrapper = []
        if self.wrapper_version is not None:
            wrapper = ["wrapper_version"]
        return ["tx", *wrapper, "blob_data", "blob_kzg_commitments", "blob_kzg_proofs"]

    def get_rlp_prefix(self) -> bytes:
        """Return the transaction type byte."""
        return bytes([self.tx.ty])
