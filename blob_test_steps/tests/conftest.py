"""
Fixtures running the steps against in-process fake execution clients.
"""

from itertools import count
from typing import Callable, List

import pytest

from blob_test_base_types import TestPrivateKey
from blob_test_clmock import CLMock, EngineClient
from blob_test_forks import Cancun, Fork, ForkSchedule
from blob_test_types import EOA, BlobGenerator

from ..context import BlobTestContext
from .fake_client import FakeExecutionClient, FakeNetwork

ContextFactory = Callable[..., BlobTestContext]

# Blob generation dominates the run time of these tests, share it between them.
SHARED_BLOB_GENERATOR = BlobGenerator()


def funded_accounts(account_count: int) -> List[EOA]:
    """Return fresh accounts at nonce zero."""
    return [EOA(key=TestPrivateKey + i) for i in range(account_count)]


@pytest.fixture
def fork() -> Fork:
    """Fork introducing the blobs under test."""
    return Cancun


@pytest.fixture
def make_context(monkeypatch: pytest.MonkeyPatch) -> ContextFactory:
    """
    Return a factory of test contexts backed by fake clients.

    The first client joins a fresh fake network and is registered in the CL mock. Clients
    launched later join the same network unless they skip the bootnode.
    """
    monkeypatch.setattr("blob_test_clmock.clmock.time.sleep", lambda _: None)

    def factory(fork_schedule: ForkSchedule, *, account_count: int = 2) -> BlobTestContext:
        network = FakeNetwork()
        names = count()

        def launch(*, connect_to_bootnode: bool) -> EngineClient:
            return FakeExecutionClient(
                f"fake-{next(names)}",
                fork_schedule,
                network=network if connect_to_bootnode else None,
            ).as_engine_client()

        first = launch(connect_to_bootnode=True)
        clmock = CLMock(fork_schedule, poll_interval=0)
        clmock.add_client(first)
        return BlobTestContext(
            fork_schedule=fork_schedule,
            clmock=clmock,
            clients=[first],
            accounts=funded_accounts(account_count),
            blob_generator=SHARED_BLOB_GENERATOR,
            client_launcher=launch,
            sync_timeout=0,
        )

    return factory


@pytest.fixture
def ctx(make_context: ContextFactory, fork: Fork) -> BlobTestContext:
    """Context of a test case with the blob fork active at genesis, past the genesis wait."""
    context = make_context(ForkSchedule(fork))
    context.clmock.wait_for_ttd(timeout=0)
    return context
