"""Types used in the RPC module for `eth` and `engine` namespaces' requests."""

from enum import Enum, IntEnum
from typing import Any, List

from pydantic import AliasChoices, Field, model_validator

from blob_test_base_types import (
    Address,
    Bloom,
    Bytes,
    CamelModel,
    Hash,
    HexNumber,
)
from blob_test_types import (
    EOA,
    BlobTransaction,
    BlockHeader,
    Withdrawal,
    kzg_to_versioned_hash,
    requests_hash,
    transactions_root,
)


class JSONRPCError(Exception):
    """Model to parse a JSON RPC error response."""

    code: int
    message: str

    def __init__(self, code: int | str, message: str, **kwargs):
        """Initialize the JSONRPCError."""
        super().__init__(code, message)
        self.code = int(code)
        self.message = message

    def __str__(self) -> str:
        """Return string representation of the JSONRPCError."""
        return f"JSONRPCError(code={self.code}, message={self.message})"


class EngineAPIError(IntEnum):
    """Error codes returned by the Engine API and the JSON-RPC layer below it."""

    ParseError = -32700
    InvalidRequest = -32600
    MethodNotFound = -32601
    InvalidParams = -32602
    InternalError = -32603
    ServerError = -32000
    UnknownPayload = -38001
    InvalidForkchoiceState = -38002
    InvalidPayloadAttributes = -38003
    TooLargeRequest = -38004
    UnsupportedFork = -38005


class TransactionByHashResponse(BlobTransaction):
    """Represents the response of a transaction by hash request."""

    block_hash: Hash | None = None
    block_number: HexNumber | None = None

    gas_limit: HexNumber = Field(HexNumber(100_000), alias="gas")
    transaction_hash: Hash = Field(..., alias="hash")
    sender: EOA | None = Field(None, alias="from")

    # The to field can have different names in different clients, so we use AliasChoices.
    to: Address = Field(..., validation_alias=AliasChoices("to_address", "to", "toAddress"))

    v: HexNumber = Field(HexNumber(0), validation_alias=AliasChoices("v", "yParity"))

    @model_validator(mode="before")
    @classmethod
    def adapt_clients_response(cls, data: Any) -> Any:
        """
        Perform modifications necessary to adapt the response returned by clients
        so it can be parsed by our model.
        """
        if isinstance(data, dict) and "yParity" in data and "v" in data:
            # Keep only one of the signature parity fields.
            del data["yParity"]
        return data

    def model_post_init(self, __context):
        """
        Check that the transaction hash returned by the client matches the one calculated by
        us.
        """
        super().model_post_init(__context)
        assert self.transaction_hash == self.hash, (
            f"client reported hash {self.transaction_hash}, computed {self.hash}"
        )


class ForkchoiceState(CamelModel):
    """Represents the forkchoice state of the beacon chain."""

    head_block_hash: Hash = Field(Hash(0))
    safe_block_hash: Hash = Field(Hash(0))
    finalized_block_hash: Hash = Field(Hash(0))


class PayloadStatusEnum(str, Enum):
    """Represents the status of a payload after execution."""

    VALID = "VALID"
    INVALID = "INVALID"
    SYNCING = "SYNCING"
    ACCEPTED = "ACCEPTED"
    INVALID_BLOCK_HASH = "INVALID_BLOCK_HASH"


class PayloadStatus(CamelModel):
    """Represents the status of a payload after execution."""

    status: PayloadStatusEnum
    latest_valid_hash: Hash | None = None
    validation_error: str | None = None


class ForkchoiceUpdateResponse(CamelModel):
    """Represents the response of a forkchoice update."""

    payload_status: PayloadStatus
    payload_id: Bytes | None = None


class PayloadAttributes(CamelModel):
    """Represents the attributes of a payload."""

    timestamp: HexNumber
    prev_randao: Hash
    suggested_fee_recipient: Address
    withdrawals: List[Withdrawal] | None = None
    parent_beacon_block_root: Hash | None = None


class BlobsBundle(CamelModel):
    """Represents the bundle of blobs."""

    commitments: List[Bytes]
    proofs: List[Bytes]
    blobs: List[Bytes]

    def blob_versioned_hashes(self, versioned_hash_version: int = 1) -> List[Hash]:
        """Return versioned hashes of the blobs."""
        return [
            kzg_to_versioned_hash(commitment, versioned_hash_version)
            for commitment in self.commitments
        ]

    def __len__(self) -> int:
        """Return the number of blobs in the bundle."""
        return len(self.blobs)


class ExecutionPayload(CamelModel):
    """Execution payload as exchanged through the Engine API."""

    parent_hash: Hash
    fee_recipient: Address
    state_root: Hash

    receipts_root: Hash
    logs_bloom: Bloom

    number: HexNumber = Field(..., alias="blockNumber")
    gas_limit: HexNumber
    gas_used: HexNumber
    timestamp: HexNumber
    extra_data: Bytes
    prev_randao: Hash

    base_fee_per_gas: HexNumber
    blob_gas_used: HexNumber | None = Field(None)
    excess_blob_gas: HexNumber | None = Field(None)

    block_hash: Hash

    transactions: List[Bytes]
    withdrawals: List[Withdrawal] | None = None

    def to_header(
        self,
        parent_beacon_block_root: Hash | None = None,
        execution_requests: List[Bytes] | None = None,
    ) -> BlockHeader:
        """Return the block header the payload describes."""
        return BlockHeader(
            parent_hash=self.parent_hash,
            fee_recipient=self.fee_recipient,
            state_root=self.state_root,
            transactions_trie=transactions_root(self.transactions),
            receipts_root=self.receipts_root,
            logs_bloom=self.logs_bloom,
            number=self.number,
            gas_limit=self.gas_limit,
            gas_used=self.gas_used,
            timestamp=self.timestamp,
            extra_data=self.extra_data,
            prev_randao=self.prev_randao,
            base_fee_per_gas=self.base_fee_per_gas,
            withdrawals_root=(
                Withdrawal.list_root(self.withdrawals) if self.withdrawals is not None else None
            ),
            blob_gas_used=self.blob_gas_used,
            excess_blob_gas=self.excess_blob_gas,
            parent_beacon_block_root=parent_beacon_block_root,
            requests_hash=(
                requests_hash(execution_requests) if execution_requests is not None else None
            ),
        )

    def compute_block_hash(
        self,
        parent_beacon_block_root: Hash | None = None,
        execution_requests: List[Bytes] | None = None,
    ) -> Hash:
        """Return the hash of the header the payload describes."""
        return self.to_header(parent_beacon_block_root, execution_requests).block_hash


class GetPayloadResponse(CamelModel):
    """Represents the response of a get payload request."""

    execution_payload: ExecutionPayload
    block_value: HexNumber | None = None
    blobs_bundle: BlobsBundle | None = None
    execution_requests: List[Bytes] | None = None
    should_override_builder: bool | None = None
