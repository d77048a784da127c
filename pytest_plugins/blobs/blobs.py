"""
Pytest plugin running the Engine API blob scenarios against hive execution clients.

Each scenario of the selected fork becomes one test case per client type. A test case
starts a client from a fresh genesis, drives it with the CL mock and runs the steps of
the scenario; clients launched by the steps share the genesis and the environment of the
first one.
"""

import io
import json
import re
from pathlib import Path
from typing import Dict, Generator, List, cast

import pytest
import rich
from hive.client import Client, ClientType
from hive.testing import HiveTest

from blob_test_base_types import TestPrivateKey
from blob_test_clmock import CLMock, EngineClient
from blob_test_forks import Fork, ForkSchedule, InvalidForkError, get_fork_by_name
from blob_test_steps import BlobsBaseSpec, BlobTestContext, ClientLauncher
from blob_test_types import EOA, BlobGenerator, CKZGCommitmentScheme
from cancun.engine_blobs.scenarios import blob_scenarios
from config import BlobSuiteConfig

from ..logging import get_logger
from .genesis import build_client_genesis
from .timing import TimingData

logger = get_logger(__name__)


class SimLimitBehavior:
    """Scenario filter derived from the `--sim.limit` argument."""

    def __init__(self, pattern: str, collectonly: bool = False):  # noqa: D107
        self.pattern = pattern
        self.collectonly = collectonly

    @classmethod
    def from_string(cls, pattern: str) -> "SimLimitBehavior":
        """
        Parse the `--sim.limit` argument.

        If `pattern`:
        - Is "collectonly", list every test case without running them.
        - Starts with "collectonly:", list the test cases matching the rest of the pattern.
        - Starts with "id:", match the rest literally.
        """
        collectonly = False
        if pattern == "collectonly":
            return cls(pattern=".*", collectonly=True)
        if pattern.startswith("collectonly:"):
            collectonly = True
            pattern = pattern[len("collectonly:") :]
        if pattern.startswith("id:"):
            literal_id = pattern[len("id:") :]
            if not literal_id:
                raise ValueError("Empty literal ID provided.")
            pattern = f".*{re.escape(literal_id)}.*"
        return cls(pattern=pattern, collectonly=collectonly)

    def matches(self, name: str) -> bool:
        """Return whether the test case named `name` is selected."""
        return re.search(self.pattern, name) is not None


def pytest_addoption(parser: pytest.Parser):  # noqa: D103
    blobs_group = parser.getgroup("blobs", "Arguments defining the blob scenarios")
    blobs_group.addoption(
        "--fork",
        action="store",
        dest="fork",
        default="Cancun",
        help="The fork introducing the blobs under test. Default: Cancun.",
    )
    blobs_group.addoption(
        "--blobs-fork-height",
        action="store",
        dest="blobs_fork_height",
        type=int,
        default=0,
        help=(
            "The number of the first block of the blob fork, the previous fork is active "
            "before it. Default: 0, the fork is active at genesis."
        ),
    )
    blobs_group.addoption(
        "--time-increments",
        action="store",
        dest="time_increments",
        type=int,
        default=1,
        help="Seconds between the timestamps of consecutive payloads. Default: 1.",
    )
    blobs_group.addoption(
        "--get-payload-delay",
        action="store",
        dest="get_payload_delay",
        type=float,
        default=0,
        help="Seconds between forkchoiceUpdated and getPayload. Default: 0.",
    )
    blobs_group.addoption(
        "--ttd-timeout",
        action="store",
        dest="ttd_timeout",
        type=float,
        default=60,
        help="Seconds to wait for the clients to accept the genesis. Default: 60.",
    )
    blobs_group.addoption(
        "--rpc-timeout",
        action="store",
        dest="rpc_timeout",
        type=float,
        default=30,
        help="Timeout of every JSON-RPC request, in seconds. Default: 30.",
    )
    blobs_group.addoption(
        "--kzg-trusted-setup",
        action="store",
        dest="kzg_trusted_setup",
        type=Path,
        default=None,
        help=(
            "Path to the KZG trusted setup used to commit to the blobs. Default: the mainnet "
            "trusted setup, downloaded once into the user cache."
        ),
    )
    blobs_group.addoption(
        "--test-account-count",
        action="store",
        dest="test_account_count",
        type=int,
        default=2,
        help="The number of funded accounts sending blob transactions. Default: 2.",
    )
    blobs_group.addoption(
        "--chain-id",
        action="store",
        dest="chain_id",
        type=int,
        default=1,
        help="The chain ID of the clients. Default: 1.",
    )
    blobs_group.addoption(
        "--timing-data",
        action="store_true",
        dest="timing_data",
        default=False,
        help="Print the timing data of each test case.",
    )
    blobs_group.addoption(
        "--sim.limit",
        action="store",
        dest="sim_limit",
        type=SimLimitBehavior.from_string,
        default=SimLimitBehavior(".*"),
        help=(
            "Filter the scenarios by a regex pattern on their name. Prefix with `id:` to "
            "match a name literally, or with `collectonly:` to list the matched test cases "
            "without running them. To list all test cases, set the value to `collectonly`."
        ),
    )


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config):  # noqa: D103
    try:
        fork = get_fork_by_name(config.getoption("fork"))
    except InvalidForkError as e:
        pytest.exit(str(e), returncode=pytest.ExitCode.USAGE_ERROR)
    if not fork.supports_blobs():
        pytest.exit(
            f"{fork} does not support blob transactions.",
            returncode=pytest.ExitCode.USAGE_ERROR,
        )
    config.blob_fork = fork
    if config.option.sim_limit.collectonly:
        config.option.collectonly = True
        config.option.verbose = -1


def pytest_generate_tests(metafunc: pytest.Metafunc):
    """Parametrize the simulator with the scenarios of the fork and the client types."""
    if "blob_scenario" in metafunc.fixturenames:
        sim_limit: SimLimitBehavior = metafunc.config.option.sim_limit
        scenarios = [
            scenario
            for scenario in blob_scenarios(metafunc.config.blob_fork)
            if sim_limit.matches(scenario.name)
        ]
        metafunc.parametrize(
            "blob_scenario", scenarios, ids=[scenario.name for scenario in scenarios]
        )
    if "client_type" in metafunc.fixturenames:
        client_ids = [client.name for client in metafunc.config.hive_execution_clients]
        metafunc.parametrize("client_type", metafunc.config.hive_execution_clients, ids=client_ids)


def pytest_collection_modifyitems(items: List[pytest.Item]):
    """Drop the name of the simulator function from the test case names reported to hive."""
    for item in items:
        remove = f"{item.originalname}["  # type: ignore[attr-defined]
        if item.name.startswith(remove):
            item.name = item.name[len(remove) : -1]


@pytest.fixture(scope="session")
def test_suite_name() -> str:
    """The name of the hive test suite used in this simulator."""
    return "engine-blobs"


@pytest.fixture(scope="session")
def test_suite_description() -> str:
    """The description of the hive test suite used in this simulator."""
    return "Test the blob transactions of the Engine API against execution clients."


@pytest.fixture(scope="function")
def test_case_description(blob_scenario: BlobsBaseSpec, fork_schedule: ForkSchedule) -> str:
    """Describe the scenario to hive."""
    about = " ".join(blob_scenario.about.split()) or "No documentation available."
    return f"{about}<br/>Fork: {fork_schedule}"


@pytest.fixture(scope="session")
def suite_config() -> BlobSuiteConfig:
    """Suite-wide defaults of the blob transactions and the client endpoints."""
    return BlobSuiteConfig()


@pytest.fixture(scope="session")
def fork(request: pytest.FixtureRequest) -> Fork:
    """The fork introducing the blobs under test."""
    return request.config.blob_fork


@pytest.fixture(scope="session")
def ttd_timeout(request: pytest.FixtureRequest) -> float:
    """Seconds to wait for the clients to accept the genesis."""
    return request.config.getoption("ttd_timeout")


@pytest.fixture(scope="function")
def fork_schedule(
    request: pytest.FixtureRequest, blob_scenario: BlobsBaseSpec, fork: Fork
) -> ForkSchedule:
    """Activation of the blob fork, from the scenario or the command line."""
    return blob_scenario.fork_schedule(
        fork,
        default_time_increments=request.config.getoption("time_increments"),
        default_blobs_fork_height=request.config.getoption("blobs_fork_height"),
    )


def kzg_blob_generator(trusted_setup: Path | None) -> BlobGenerator:
    """Return a blob generator committing to the blobs with ckzg."""
    return BlobGenerator(CKZGCommitmentScheme(trusted_setup))


@pytest.fixture(scope="session")
def blob_generator(request: pytest.FixtureRequest) -> BlobGenerator:
    """Blob generator shared by the test cases of the session."""
    trusted_setup: Path | None = request.config.getoption("kzg_trusted_setup")
    return kzg_blob_generator(trusted_setup)


@pytest.fixture(scope="function")
def test_accounts(request: pytest.FixtureRequest) -> List[EOA]:
    """Funded accounts at nonce zero."""
    account_count = request.config.getoption("test_account_count")
    return [EOA(key=TestPrivateKey + i) for i in range(account_count)]


@pytest.fixture(scope="function")
def client_genesis(
    fork_schedule: ForkSchedule, test_accounts: List[EOA], suite_config: BlobSuiteConfig
) -> dict:
    """The genesis every client of the test case is started with."""
    return build_client_genesis(fork_schedule, test_accounts, suite_config)


def buffered_genesis(client_genesis: dict) -> io.BufferedReader:
    """Return a reader of the genesis file; hive consumes one per started client."""
    genesis_bytes = json.dumps(client_genesis).encode("utf-8")
    return io.BufferedReader(cast(io.RawIOBase, io.BytesIO(genesis_bytes)))


@pytest.fixture(scope="function")
def environment(
    request: pytest.FixtureRequest, fork_schedule: ForkSchedule, suite_config: BlobSuiteConfig
) -> Dict[str, str]:
    """Define the environment that hive will start the clients with."""
    return {
        "HIVE_CHAIN_ID": str(request.config.getoption("chain_id")),
        "HIVE_NODETYPE": "full",
        "HIVE_CHECK_LIVE_PORT": str(suite_config.ENGINE_PORT),
        **fork_schedule.hive_environment(),
    }


def engine_client(
    name: str, client: Client, rpc_timeout: float, suite_config: BlobSuiteConfig
) -> EngineClient:
    """Return the endpoints of a client started by hive."""
    return EngineClient.from_ip(
        name,
        str(client.ip),
        timeout=rpc_timeout,
        jwt_secret=suite_config.JWT_SECRET,
        eth_port=suite_config.ETH_PORT,
        engine_port=suite_config.ENGINE_PORT,
    )


def enode_url(client: Client) -> str:
    """Return the enode URL other clients use to peer with `client`."""
    enode = client.enode()
    return f"enode://{enode.id}@{client.ip}:{enode.port}"


@pytest.fixture(scope="function", autouse=True)
def total_timing_data(request: pytest.FixtureRequest) -> Generator[TimingData, None, None]:
    """Record the durations of the phases of the test case."""
    with TimingData("Total (seconds)") as total_timing_data:
        yield total_timing_data
    logger.verbose(f"Timing data:\n{total_timing_data.formatted()}")
    if request.config.getoption("timing_data"):
        rich.print(f"\n{total_timing_data.formatted()}")


@pytest.fixture(scope="function")
def client(
    hive_test: HiveTest,
    client_type: ClientType,
    client_genesis: dict,
    environment: Dict[str, str],
    total_timing_data: TimingData,
) -> Generator[Client, None, None]:
    """Start the first client of the test case."""
    logger.info(f"Starting client ({client_type.name})...")
    with total_timing_data.time("Start client"):
        client = hive_test.start_client(
            client_type=client_type,
            environment=environment,
            files={"/genesis.json": buffered_genesis(client_genesis)},
        )
    assert client is not None, (
        f"Unable to connect to the client container ({client_type.name}) via Hive during test "
        "setup. Check the client or Hive server logs for more information."
    )
    logger.info(f"Client ({client_type.name}) ready!")
    yield client
    logger.info(f"Stopping client ({client_type.name})...")
    with total_timing_data.time("Stop client"):
        client.stop()


@pytest.fixture(scope="function")
def client_launcher(
    request: pytest.FixtureRequest,
    hive_test: HiveTest,
    client_type: ClientType,
    client: Client,
    client_genesis: dict,
    environment: Dict[str, str],
    suite_config: BlobSuiteConfig,
    total_timing_data: TimingData,
) -> Generator[ClientLauncher, None, None]:
    """
    Start the clients requested by the steps, with the genesis and environment of the
    first client, and stop them at the end of the test case.
    """
    rpc_timeout = request.config.getoption("rpc_timeout")
    launched: List[Client] = []

    def launch(*, connect_to_bootnode: bool) -> EngineClient:
        index = len(launched) + 1
        client_environment = dict(environment)
        if connect_to_bootnode:
            client_environment["HIVE_BOOTNODE"] = enode_url(client)
        with total_timing_data.time(f"Start client {index}"):
            new_client = hive_test.start_client(
                client_type=client_type,
                environment=client_environment,
                files={"/genesis.json": buffered_genesis(client_genesis)},
            )
        assert new_client is not None, f"Unable to start client {index} ({client_type.name})"
        launched.append(new_client)
        return engine_client(f"{client_type.name}-{index}", new_client, rpc_timeout, suite_config)

    yield launch

    with total_timing_data.time("Stop launched clients"):
        for launched_client in launched:
            launched_client.stop()


@pytest.fixture(scope="function")
def blob_test_context(
    request: pytest.FixtureRequest,
    client_type: ClientType,
    client: Client,
    client_launcher: ClientLauncher,
    fork_schedule: ForkSchedule,
    test_accounts: List[EOA],
    blob_generator: BlobGenerator,
    suite_config: BlobSuiteConfig,
) -> BlobTestContext:
    """The state of the test case, with the first client registered in the CL mock."""
    first_client = engine_client(
        f"{client_type.name}-0", client, request.config.getoption("rpc_timeout"), suite_config
    )
    clmock = CLMock(
        fork_schedule,
        time_increments=request.config.getoption("time_increments"),
        payload_production_client_delay=request.config.getoption("get_payload_delay"),
    )
    clmock.add_client(first_client)
    return BlobTestContext(
        fork_schedule=fork_schedule,
        clmock=clmock,
        clients=[first_client],
        accounts=test_accounts,
        blob_generator=blob_generator,
        config=suite_config,
        chain_id=request.config.getoption("chain_id"),
        client_launcher=client_launcher,
        sync_timeout=request.config.getoption("ttd_timeout"),
    )


@pytest.fixture(scope="function")
def timing_data(
    total_timing_data: TimingData, client: Client
) -> Generator[TimingData, None, None]:
    """Record the duration of the steps of the test case."""
    with total_timing_data.time("Test case execution") as timing_data:
        yield timing_data
