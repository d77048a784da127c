"""
Test the JSON-RPC transport against a patched `requests.post`.
"""

from typing import Any, Dict, List

import jwt
import pytest

from blob_test_base_types import Hash, TestPrivateKey
from blob_test_types import EOA, BlobGenerator, BlobTransaction, NetworkWrappedTransaction

from .. import rpc as rpc_module
from ..rpc import DEFAULT_JWT_SECRET, EngineRPC, EthRPC, SendTransactionExceptionError
from ..types import (
    EngineAPIError,
    ForkchoiceState,
    JSONRPCError,
    PayloadStatusEnum,
    TransactionByHashResponse,
)


class FakeResponse:
    """Response of the patched `requests.post`."""

    def __init__(self, body: Dict[str, Any]):
        """Store the JSON body."""
        self.body = body

    def raise_for_status(self) -> None:
        """Accept every status."""

    def json(self) -> Dict[str, Any]:
        """Return the JSON body."""
        return self.body


class RecordingPost:
    """Replacement of `requests.post` replying with queued JSON-RPC bodies."""

    def __init__(self):
        """Start without requests or replies."""
        self.requests: List[Dict[str, Any]] = []
        self.replies: List[Dict[str, Any]] = []

    def reply(self, result: Any = None, error: Dict[str, Any] | None = None) -> None:
        """Queue a result, or an error object when given."""
        if error is not None:
            self.replies.append({"jsonrpc": "2.0", "id": 1, "error": error})
        else:
            self.replies.append({"jsonrpc": "2.0", "id": 1, "result": result})

    def __call__(self, url, json, headers, timeout):
        """Record the request and return the next queued reply."""
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return FakeResponse(self.replies.pop(0))


@pytest.fixture
def post(monkeypatch) -> RecordingPost:
    """Patch `requests.post` in the RPC module."""
    recorder = RecordingPost()
    monkeypatch.setattr(rpc_module.requests, "post", recorder)
    return recorder


@pytest.fixture
def blob_tx() -> BlobTransaction:
    """Return a signed single-blob transaction."""
    blobs = BlobGenerator().blobs([7])
    tx = BlobTransaction(
        nonce=0,
        max_priority_fee_per_gas=10**9,
        max_fee_per_gas=30 * 10**9,
        max_fee_per_blob_gas=1,
        blob_versioned_hashes=[blob.versioned_hash() for blob in blobs],
        blobs=blobs,
        sender=EOA(key=TestPrivateKey),
    )
    tx.sign()
    return tx


def test_namespaces():
    """Test the namespace derived from the class name."""
    assert EthRPC.namespace == "eth"
    assert EngineRPC.namespace == "engine"


def test_post_request(post: RecordingPost):
    """Test the request envelope and the increasing request ids."""
    post.reply({"number": "0x0"})
    post.reply({"number": "0x2a"})
    eth = EthRPC("http://127.0.0.1:8545", timeout=5)
    assert eth.get_block_by_number(0, False) == {"number": "0x0"}
    assert eth.get_block_by_number() == {"number": "0x2a"}
    first, second = post.requests
    assert first["json"]["method"] == "eth_getBlockByNumber"
    assert list(first["json"]["params"]) == ["0x0", False]
    assert list(second["json"]["params"]) == ["latest", True]
    assert first["json"]["id"] == 1
    assert second["json"]["id"] == 2
    assert first["timeout"] == 5
    assert first["headers"]["Content-Type"] == "application/json"
    assert "Authorization" not in first["headers"]


def test_error_response(post: RecordingPost):
    """Test that a JSON-RPC error object is raised with its code."""
    post.reply(error={"code": -32602, "message": "invalid params"})
    with pytest.raises(JSONRPCError) as e:
        EthRPC("http://127.0.0.1:8545").get_block_by_number()
    assert e.value.code == EngineAPIError.InvalidParams
    assert "invalid params" in str(e.value)


def test_engine_jwt_header(post: RecordingPost):
    """Test that Engine API requests carry a token signed with the hive secret."""
    post.reply({"payloadStatus": {"status": "VALID"}, "payloadId": None})
    engine = EngineRPC("http://127.0.0.1:8551")
    response = engine.forkchoice_updated(ForkchoiceState(head_block_hash=Hash(1)), version=3)
    assert response.payload_status.status == PayloadStatusEnum.VALID

    request = post.requests[0]
    assert request["json"]["method"] == "engine_forkchoiceUpdatedV3"
    token = request["headers"]["Authorization"].removeprefix("Bearer ")
    assert "iat" in jwt.decode(token, DEFAULT_JWT_SECRET, algorithms=["HS256"])
    state, attributes = request["json"]["params"]
    assert state["headBlockHash"] == str(Hash(1))
    assert attributes is None


def test_new_payload_null_and_empty_hashes(post: RecordingPost):
    """Test that a nil hash list is sent as null and an empty one as an empty array."""
    post.reply({"status": "INVALID", "latestValidHash": None, "validationError": "x"})
    post.reply({"status": "VALID", "latestValidHash": str(Hash(2))})
    engine = EngineRPC("http://127.0.0.1:8551")

    status = engine.new_payload(Hash(3), None, Hash(0), version=3)
    assert status.status == PayloadStatusEnum.INVALID
    assert status.validation_error == "x"
    assert post.requests[0]["json"]["params"][1] is None

    status = engine.new_payload(Hash(3), [], Hash(0), version=3)
    assert status.latest_valid_hash == Hash(2)
    assert post.requests[1]["json"]["params"][1] == []


def test_send_transaction(post: RecordingPost, blob_tx: BlobTransaction):
    """Test that blob transactions are sent with their network wrapper."""
    post.reply(str(blob_tx.hash))
    eth = EthRPC("http://127.0.0.1:8545")
    assert eth.send_transaction(blob_tx) == blob_tx.hash
    raw = post.requests[0]["json"]["params"][0]
    assert raw.startswith("0x03")
    assert len(raw) > 2 * 131_072


def test_send_transaction_hash_mismatch(post: RecordingPost, blob_tx: BlobTransaction):
    """Test that a hash other than the computed one is a send failure."""
    post.reply(str(Hash(1)))
    with pytest.raises(SendTransactionExceptionError) as e:
        EthRPC("http://127.0.0.1:8545").send_transaction(blob_tx)
    assert e.value.tx is blob_tx
    assert e.value.tx_rlp == NetworkWrappedTransaction(tx=blob_tx).rlp()
    assert "Transaction=" in str(e.value)


def test_send_transaction_rejected(post: RecordingPost, blob_tx: BlobTransaction):
    """Test that a client rejection is wrapped with the offending transaction."""
    post.reply(error={"code": -32000, "message": "blob fee cap too low"})
    with pytest.raises(SendTransactionExceptionError, match="blob fee cap too low"):
        EthRPC("http://127.0.0.1:8545").send_transaction(blob_tx)


def test_get_transaction_by_hash(post: RecordingPost, blob_tx: BlobTransaction):
    """Test parsing of a client's transaction report, keyed by `yParity`."""
    post.reply(
        {
            "type": "0x3",
            "chainId": "0x1",
            "nonce": "0x0",
            "gas": hex(blob_tx.gas_limit),
            "maxPriorityFeePerGas": hex(blob_tx.max_priority_fee_per_gas),
            "maxFeePerGas": hex(blob_tx.max_fee_per_gas),
            "maxFeePerBlobGas": "0x1",
            "to": str(blob_tx.to),
            "value": "0x0",
            "input": "0x",
            "accessList": [],
            "blobVersionedHashes": [str(h) for h in blob_tx.blob_versioned_hashes],
            "yParity": hex(blob_tx.v),
            "r": hex(blob_tx.r),
            "s": hex(blob_tx.s),
            "hash": str(blob_tx.hash),
            "from": str(blob_tx.sender),
            "blockHash": None,
            "blockNumber": None,
        }
    )
    response = EthRPC("http://127.0.0.1:8545").get_transaction_by_hash(blob_tx.hash)
    assert isinstance(response, TransactionByHashResponse)
    assert response.transaction_hash == blob_tx.hash
    assert response.blob_versioned_hashes == blob_tx.blob_versioned_hashes
    assert response.sender == blob_tx.sender


def test_get_unknown_transaction(post: RecordingPost):
    """Test that an unknown transaction is reported as `None`."""
    post.reply(None)
    assert EthRPC("http://127.0.0.1:8545").get_transaction_by_hash(Hash(5)) is None
