"""
Consensus layer mock driving block production through the Engine API.

The mock keeps the forkchoice of every registered execution client in step: it asks one
of them to build a payload, broadcasts the payload to all of them and moves their head
to it. Callers hook into the production of a block through two callbacks, invoked after
the payload is retrieved and after it has been broadcast.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import requests

from blob_test_base_types import Address, Bytes, Hash, HexNumber
from blob_test_forks import Fork, ForkSchedule
from blob_test_rpc import (
    DEFAULT_JWT_SECRET,
    DEFAULT_RPC_TIMEOUT,
    BlobsBundle,
    EngineRPC,
    EthRPC,
    ExecutionPayload,
    ForkchoiceState,
    GetPayloadResponse,
    JSONRPCError,
    PayloadAttributes,
    PayloadStatusEnum,
)
from pytest_plugins.logging import get_logger

ETH_PORT = 8545
ENGINE_PORT = 8551

logger = get_logger(__name__)


class CLMockError(Exception):
    """A client response broke the production of a block."""

    pass


class CLMockTimeoutError(CLMockError):
    """The clients did not become ready before the deadline."""

    pass


@dataclass
class EngineClient:
    """An execution client reachable through its `eth` and `engine` endpoints."""

    name: str
    eth: EthRPC
    engine: EngineRPC

    @classmethod
    def from_ip(
        cls,
        name: str,
        ip: str,
        *,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        jwt_secret: bytes = DEFAULT_JWT_SECRET,
        eth_port: int = ETH_PORT,
        engine_port: int = ENGINE_PORT,
    ) -> "EngineClient":
        """Return the client listening on the hive default ports of `ip`."""
        return cls(
            name=name,
            eth=EthRPC(f"http://{ip}:{eth_port}", timeout=timeout),
            engine=EngineRPC(
                f"http://{ip}:{engine_port}", timeout=timeout, jwt_secret=jwt_secret
            ),
        )

    def __str__(self) -> str:
        """Return the client name."""
        return self.name


def new_payload_params(
    fork: Fork,
    payload: ExecutionPayload,
    versioned_hashes: List[Hash] | None,
    parent_beacon_block_root: Hash | None,
    execution_requests: List[Bytes] | None,
) -> List[Any]:
    """
    Return the positional parameters of `engine_newPayloadVX` for the fork.

    From V3 on, the versioned hashes and the beacon root are always sent, even when
    `None`, so that an absent list reaches the client as `null`.
    """
    version = fork.engine_new_payload_version()
    params: List[Any] = [payload]
    if version is not None and version >= 3:
        params += [versioned_hashes, parent_beacon_block_root]
    if version is not None and version >= 4:
        params.append(execution_requests if execution_requests is not None else [])
    return params


GetPayloadCallback = Callable[["CLMock", EngineClient, GetPayloadResponse], None]
NewPayloadBroadcastCallback = Callable[["CLMock", ExecutionPayload], None]


@dataclass
class CLMock:
    """
    Produces blocks on the registered clients, one at a time.

    Engine method versions follow the fork active at the timestamp of each payload, so a
    schedule activating blobs after genesis produces pre-fork blocks with the previous
    method versions.
    """

    fork_schedule: ForkSchedule
    time_increments: int = 1
    payload_production_client_delay: float = 0
    poll_interval: float = 1

    clients: List[EngineClient] = field(default_factory=list)

    head_block_hash: Hash | None = None
    head_block_number: int = 0
    head_block_timestamp: int = 0
    header_history: Dict[int, Hash] = field(default_factory=dict)

    latest_payload: ExecutionPayload | None = None
    latest_blobs_bundle: BlobsBundle | None = None
    latest_execution_requests: List[Bytes] | None = None
    latest_parent_beacon_block_root: Hash | None = None
    latest_producer: EngineClient | None = None

    def add_client(self, client: EngineClient) -> None:
        """Register a client for block production and payload broadcast."""
        logger.verbose(f"Adding client {client} to the CL mock")
        self.clients.append(client)

    @property
    def forkchoice_state(self) -> ForkchoiceState:
        """Return the forkchoice state pointing at the current head."""
        assert self.head_block_hash is not None, "CL mock has no head yet"
        return ForkchoiceState(head_block_hash=self.head_block_hash)

    def fork_at(self, timestamp: int) -> Fork:
        """Return the fork active at the timestamp."""
        return self.fork_schedule.fork_at(timestamp)

    def next_payload_fork(self) -> Fork:
        """Return the fork active at the timestamp of the next payload."""
        return self.fork_at(self.head_block_timestamp + self.time_increments)

    def next_block_producer(self) -> EngineClient:
        """Return the client that builds the next block, rotating over the clients."""
        if not self.clients:
            raise CLMockError("no client registered to produce blocks")
        return self.clients[(self.head_block_number + 1) % len(self.clients)]

    def _forkchoice_version(self, timestamp: int) -> int:
        version = self.fork_at(timestamp).engine_forkchoice_updated_version()
        assert version is not None, "fork does not support engine_forkchoiceUpdated"
        return version

    def wait_for_ttd(self, timeout: float) -> None:
        """
        Wait until every client accepts the genesis block as head.

        Connection failures and non-VALID responses are polled again until `timeout`
        seconds have passed, after which `CLMockTimeoutError` is raised.
        """
        if not self.clients:
            raise CLMockError("no client registered")
        deadline = time.monotonic() + timeout
        pending = list(self.clients)
        while pending:
            client = pending[0]
            try:
                genesis = client.eth.get_block_by_number(0, False)
                genesis_hash = Hash(genesis["hash"])
                genesis_timestamp = HexNumber(genesis["timestamp"])
                response = client.engine.forkchoice_updated(
                    ForkchoiceState(head_block_hash=genesis_hash),
                    None,
                    version=self._forkchoice_version(genesis_timestamp),
                )
                if response.payload_status.status == PayloadStatusEnum.VALID:
                    pending.pop(0)
                    self.head_block_hash = genesis_hash
                    self.head_block_number = 0
                    self.head_block_timestamp = genesis_timestamp
                    self.header_history[0] = genesis_hash
                    logger.verbose(f"Client {client} ready at genesis {genesis_hash}")
                    continue
                logger.debug(f"Client {client} not ready: {response.payload_status.status}")
            except (requests.RequestException, JSONRPCError) as e:
                logger.debug(f"Client {client} not ready: {e}")
            if time.monotonic() >= deadline:
                raise CLMockTimeoutError(
                    f"client {client} did not accept the genesis block within {timeout}s"
                )
            time.sleep(self.poll_interval)

    def sync_client(self, client: EngineClient, timeout: float) -> None:
        """
        Wait until a client joining late accepts the current head.

        The client must be able to fetch the chain from its peers; `CLMockTimeoutError` is
        raised if it still answers SYNCING after `timeout` seconds.
        """
        deadline = time.monotonic() + timeout
        version = self._forkchoice_version(self.head_block_timestamp)
        while True:
            response = client.engine.forkchoice_updated(
                self.forkchoice_state, None, version=version
            )
            if response.payload_status.status == PayloadStatusEnum.VALID:
                logger.verbose(f"Client {client} synced to {self.head_block_hash}")
                return
            if time.monotonic() >= deadline:
                raise CLMockTimeoutError(
                    f"client {client} did not sync to {self.head_block_hash} within {timeout}s"
                )
            time.sleep(self.poll_interval)

    def produce_single_block(
        self,
        *,
        on_get_payload: GetPayloadCallback | None = None,
        on_new_payload_broadcast: NewPayloadBroadcastCallback | None = None,
        get_payload_delay: float | None = None,
    ) -> ExecutionPayload:
        """Build a block on the next producer, broadcast it and make it the head."""
        producer = self.next_block_producer()
        timestamp = self.head_block_timestamp + self.time_increments
        fork = self.fork_at(timestamp)
        forkchoice_version = self._forkchoice_version(timestamp)
        parent_beacon_block_root = Hash(0) if fork.header_beacon_root_required() else None

        payload_attributes = PayloadAttributes(
            timestamp=HexNumber(timestamp),
            prev_randao=Hash(0),
            suggested_fee_recipient=Address(0),
            withdrawals=[] if fork.header_withdrawals_required() else None,
            parent_beacon_block_root=parent_beacon_block_root,
        )
        response = producer.engine.forkchoice_updated(
            self.forkchoice_state, payload_attributes, version=forkchoice_version
        )
        if response.payload_status.status != PayloadStatusEnum.VALID:
            raise CLMockError(
                f"{producer} answered forkchoiceUpdated with {response.payload_status.status}"
            )
        if response.payload_id is None:
            raise CLMockError(f"{producer} did not return a payload id")

        delay = (
            get_payload_delay
            if get_payload_delay is not None
            else self.payload_production_client_delay
        )
        if delay:
            time.sleep(delay)

        get_payload_version = fork.engine_get_payload_version()
        assert get_payload_version is not None, "fork does not support engine_getPayload"
        built = producer.engine.get_payload(response.payload_id, version=get_payload_version)
        payload = built.execution_payload
        logger.verbose(
            f"{producer} built payload {payload.number} ({payload.block_hash}) with "
            f"{len(built.blobs_bundle) if built.blobs_bundle else 0} blobs"
        )

        self.latest_payload = payload
        self.latest_blobs_bundle = built.blobs_bundle
        self.latest_execution_requests = built.execution_requests
        self.latest_parent_beacon_block_root = parent_beacon_block_root
        self.latest_producer = producer

        if on_get_payload is not None:
            on_get_payload(self, producer, built)

        self.broadcast_new_payload(fork, payload)
        if on_new_payload_broadcast is not None:
            on_new_payload_broadcast(self, payload)

        self.head_block_hash = payload.block_hash
        self.head_block_number = payload.number
        self.head_block_timestamp = payload.timestamp
        self.header_history[payload.number] = payload.block_hash
        for client in self.clients:
            fcu_response = client.engine.forkchoice_updated(
                self.forkchoice_state, None, version=forkchoice_version
            )
            if fcu_response.payload_status.status != PayloadStatusEnum.VALID:
                raise CLMockError(
                    f"{client} answered forkchoiceUpdated to {payload.block_hash} with "
                    f"{fcu_response.payload_status.status}"
                )
        return payload

    def broadcast_new_payload(self, fork: Fork, payload: ExecutionPayload) -> None:
        """Send the canonical form of the latest payload to every client."""
        version = fork.engine_new_payload_version()
        assert version is not None, "fork does not support engine_newPayload"
        params = new_payload_params(
            fork,
            payload,
            (
                self.latest_blobs_bundle.blob_versioned_hashes()
                if self.latest_blobs_bundle is not None
                else []
            ),
            self.latest_parent_beacon_block_root,
            self.latest_execution_requests,
        )
        for client in self.clients:
            status = client.engine.new_payload(*params, version=version)
            if status.status != PayloadStatusEnum.VALID:
                raise CLMockError(
                    f"{client} answered newPayload of {payload.block_hash} with "
                    f"{status.status}: {status.validation_error}"
                )
