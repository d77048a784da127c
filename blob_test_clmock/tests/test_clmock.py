"""
Test the CL mock against mocked execution clients.
"""

from typing import List
from unittest.mock import MagicMock

import pytest
import requests

from blob_test_base_types import Address, Bloom, Bytes, Hash, to_json
from blob_test_forks import Cancun, ForkSchedule, Prague, Shanghai
from blob_test_rpc import (
    BlobsBundle,
    ExecutionPayload,
    ForkchoiceUpdateResponse,
    GetPayloadResponse,
    PayloadStatus,
    PayloadStatusEnum,
)

from ..clmock import CLMock, CLMockError, CLMockTimeoutError, EngineClient, new_payload_params

GENESIS_HASH = Hash(0x99)


def make_payload(number: int, timestamp: int, parent_hash: Hash) -> ExecutionPayload:
    """Return a payload with placeholder contents."""
    return ExecutionPayload(
        parent_hash=parent_hash,
        fee_recipient=Address(0),
        state_root=Hash(0),
        receipts_root=Hash(0),
        logs_bloom=Bloom(0),
        number=number,
        gas_limit=30_000_000,
        gas_used=0,
        timestamp=timestamp,
        extra_data=Bytes(b""),
        prev_randao=Hash(0),
        base_fee_per_gas=7,
        blob_gas_used=0,
        excess_blob_gas=0,
        block_hash=Hash(0x1000 + number),
        transactions=[],
        withdrawals=[],
    )


def fcu_response(status: PayloadStatusEnum, payload_id: bytes | None = None):
    """Return a forkchoiceUpdated response."""
    return ForkchoiceUpdateResponse(
        payload_status=PayloadStatus(status=status),
        payload_id=Bytes(payload_id) if payload_id is not None else None,
    )


def mock_client(name: str, genesis_timestamp: int = 0) -> EngineClient:
    """Return a client whose every Engine API call succeeds."""
    eth = MagicMock()
    eth.get_block_by_number.return_value = {
        "hash": str(GENESIS_HASH),
        "timestamp": hex(genesis_timestamp),
    }
    engine = MagicMock()
    engine.forkchoice_updated.return_value = fcu_response(PayloadStatusEnum.VALID, b"\x01" * 8)
    engine.new_payload.return_value = PayloadStatus(status=PayloadStatusEnum.VALID)

    def get_payload(payload_id, *, version):
        number = len(engine.get_payload.call_args_list)
        timestamp = engine.forkchoice_updated.call_args_list[-1].args[1].timestamp
        return GetPayloadResponse(
            execution_payload=make_payload(number, timestamp, GENESIS_HASH),
            blobs_bundle=BlobsBundle(
                commitments=[Bytes(b"\x0c" * 48)], proofs=[Bytes(b"\x0d" * 48)], blobs=[]
            ),
        )

    engine.get_payload.side_effect = get_payload
    return EngineClient(name=name, eth=eth, engine=engine)


@pytest.fixture
def clmock() -> CLMock:
    """Return a CL mock with two ready clients, on Cancun from genesis."""
    mock = CLMock(fork_schedule=ForkSchedule(Cancun), poll_interval=0)
    mock.add_client(mock_client("client-0"))
    mock.add_client(mock_client("client-1"))
    mock.wait_for_ttd(timeout=1)
    return mock


def test_wait_for_ttd_sets_genesis_head(clmock: CLMock):
    """Test that the head is the genesis block once every client is ready."""
    assert clmock.head_block_hash == GENESIS_HASH
    assert clmock.header_history == {0: GENESIS_HASH}
    for client in clmock.clients:
        args = client.engine.forkchoice_updated.call_args
        assert args.args[0].head_block_hash == GENESIS_HASH
        assert args.args[1] is None
        assert args.kwargs["version"] == 3


def test_wait_for_ttd_retries_until_valid():
    """Test that connection failures and SYNCING responses are polled again."""
    client = mock_client("client-0")
    client.engine.forkchoice_updated.side_effect = [
        requests.ConnectionError("refused"),
        fcu_response(PayloadStatusEnum.SYNCING),
        fcu_response(PayloadStatusEnum.VALID),
    ]
    mock = CLMock(fork_schedule=ForkSchedule(Cancun), poll_interval=0)
    mock.add_client(client)
    mock.wait_for_ttd(timeout=10)
    assert client.engine.forkchoice_updated.call_count == 3


def test_wait_for_ttd_timeout():
    """Test that a client that never becomes ready fails with a timeout."""
    client = mock_client("client-0")
    client.engine.forkchoice_updated.return_value = fcu_response(PayloadStatusEnum.SYNCING)
    mock = CLMock(fork_schedule=ForkSchedule(Cancun), poll_interval=0)
    mock.add_client(client)
    with pytest.raises(CLMockTimeoutError):
        mock.wait_for_ttd(timeout=0)


def test_wait_for_ttd_without_clients():
    """Test that waiting with no client registered is refused."""
    with pytest.raises(CLMockError):
        CLMock(fork_schedule=ForkSchedule(Cancun)).wait_for_ttd(timeout=1)


def test_produce_single_block(clmock: CLMock):
    """Test the Engine API sequence of one block production."""
    seen: List[str] = []
    producer = clmock.next_block_producer()

    def on_get_payload(mock, client, response):
        assert client is producer
        assert response.execution_payload.number == 1
        seen.append("get_payload")

    def on_new_payload_broadcast(mock, payload):
        for client in mock.clients:
            client.engine.new_payload.assert_called_once()
        seen.append("broadcast")

    payload = clmock.produce_single_block(
        on_get_payload=on_get_payload, on_new_payload_broadcast=on_new_payload_broadcast
    )
    assert seen == ["get_payload", "broadcast"]
    assert clmock.head_block_hash == payload.block_hash
    assert clmock.head_block_number == 1
    assert clmock.header_history[1] == payload.block_hash
    assert clmock.latest_payload == payload
    assert clmock.latest_parent_beacon_block_root == Hash(0)

    attributes = producer.engine.forkchoice_updated.call_args_list[1].args[1]
    assert attributes.timestamp == 1
    assert attributes.withdrawals == []
    assert attributes.parent_beacon_block_root == Hash(0)

    for client in clmock.clients:
        params = client.engine.new_payload.call_args.args
        assert params[0] == payload
        assert params[1] == clmock.latest_blobs_bundle.blob_versioned_hashes()
        assert params[2] == Hash(0)
        assert client.engine.new_payload.call_args.kwargs["version"] == 3
        last_fcu = client.engine.forkchoice_updated.call_args
        assert last_fcu.args[0].head_block_hash == payload.block_hash
        assert last_fcu.args[1] is None


def test_producer_rotates(clmock: CLMock):
    """Test that consecutive blocks are built by different clients."""
    first = clmock.next_block_producer()
    clmock.produce_single_block()
    second = clmock.next_block_producer()
    assert first is not second
    assert first.engine.get_payload.call_count == 1


def test_invalid_broadcast_fails(clmock: CLMock):
    """Test that a client refusing the canonical payload breaks block production."""
    clmock.clients[0].engine.new_payload.return_value = PayloadStatus(
        status=PayloadStatusEnum.INVALID, validation_error="bad block"
    )
    with pytest.raises(CLMockError, match="bad block"):
        clmock.produce_single_block()


def test_missing_payload_id_fails(clmock: CLMock):
    """Test that forkchoiceUpdated without a payload id breaks block production."""
    for client in clmock.clients:
        client.engine.forkchoice_updated.return_value = fcu_response(PayloadStatusEnum.VALID)
    with pytest.raises(CLMockError, match="payload id"):
        clmock.produce_single_block()


def test_versions_follow_fork_schedule():
    """Test that blocks before the activation use the previous fork's methods."""
    mock = CLMock(fork_schedule=ForkSchedule(Cancun, activation_timestamp=2), poll_interval=0)
    client = mock_client("client-0")
    mock.add_client(client)
    mock.wait_for_ttd(timeout=1)

    mock.produce_single_block()
    assert client.engine.get_payload.call_args.kwargs["version"] == 2
    assert client.engine.new_payload.call_args.kwargs["version"] == 2
    assert len(client.engine.new_payload.call_args.args) == 1
    assert mock.latest_parent_beacon_block_root is None

    mock.produce_single_block()
    assert client.engine.get_payload.call_args.kwargs["version"] == 3
    assert client.engine.new_payload.call_args.kwargs["version"] == 3
    assert len(client.engine.new_payload.call_args.args) == 3


def test_new_payload_params():
    """Test the positional parameters of each newPayload version."""
    payload = make_payload(1, 1, GENESIS_HASH)
    assert new_payload_params(Shanghai, payload, [Hash(1)], Hash(0), None) == [payload]
    assert new_payload_params(Cancun, payload, None, Hash(0), None) == [payload, None, Hash(0)]
    assert new_payload_params(Prague, payload, [], Hash(0), None) == [
        payload,
        [],
        Hash(0),
        [],
    ]
    assert to_json(new_payload_params(Cancun, payload, None, Hash(0), None))[1] is None
