"""State shared by the steps of one blob test case."""

from dataclasses import dataclass, field
from typing import List, Protocol

from blob_test_clmock import CLMock, EngineClient
from blob_test_forks import Fork, ForkSchedule
from blob_test_types import EOA, BlobGenerator, BlobID
from config import BlobSuiteConfig
from pytest_plugins.logging import get_logger

from .exceptions import InvalidStepError
from .inclusion import InclusionModel
from .pool import TestBlobTxPool

logger = get_logger(__name__)


class ClientLauncher(Protocol):
    """Starts one more execution client with the genesis of the test case."""

    def __call__(self, *, connect_to_bootnode: bool) -> EngineClient:
        """Start the client and return it once its endpoints are reachable."""
        ...


@dataclass
class BlobTestContext:
    """
    Mutable state of a test case, created at its start and discarded at its end.

    Clients and accounts are addressed by their index in `clients` and `accounts`. The
    first client is the one started by the test fixture, the others are added by
    `LaunchClients` steps.
    """

    fork_schedule: ForkSchedule
    clmock: CLMock
    clients: List[EngineClient]
    accounts: List[EOA]
    blob_generator: BlobGenerator = field(default_factory=BlobGenerator)
    pool: TestBlobTxPool = field(default_factory=TestBlobTxPool)
    inclusion: InclusionModel = field(default_factory=InclusionModel)
    config: BlobSuiteConfig = field(default_factory=BlobSuiteConfig)
    chain_id: int = 1
    client_launcher: ClientLauncher | None = None
    sync_timeout: float = 60
    next_blob_id: BlobID = 0

    @property
    def fork(self) -> Fork:
        """Return the fork introducing the blobs under test."""
        return self.fork_schedule.fork

    def allocate_blob_ids(self, count: int) -> List[BlobID]:
        """Return `count` blob ids never handed out before in this test case."""
        blob_ids = list(range(self.next_blob_id, self.next_blob_id + count))
        self.next_blob_id += count
        return blob_ids

    def client(self, index: int) -> EngineClient:
        """Return the client with the given index."""
        if not 0 <= index < len(self.clients):
            raise InvalidStepError(f"no client {index}, {len(self.clients)} clients launched")
        return self.clients[index]

    def account(self, index: int) -> EOA:
        """Return the test account with the given index."""
        if not 0 <= index < len(self.accounts):
            raise InvalidStepError(f"no account {index}, {len(self.accounts)} accounts funded")
        return self.accounts[index]

    def launch_client(self, *, connect_to_bootnode: bool) -> EngineClient:
        """Start a new client and append it to `clients`."""
        if self.client_launcher is None:
            raise InvalidStepError("this test context cannot launch clients")
        client = self.client_launcher(connect_to_bootnode=connect_to_bootnode)
        self.clients.append(client)
        logger.info(f"Launched client {len(self.clients) - 1}: {client}")
        return client
