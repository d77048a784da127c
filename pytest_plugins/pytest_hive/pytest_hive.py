"""
A pytest plugin reporting the blob scenarios to a hive simulator.

Simulators using this plugin must define the fixtures `test_suite_name`,
`test_suite_description` and `test_case_description`.

Every xdist worker shares the same hive test suite: the first worker starts it and
stores it in the session temp folder, the last one to finish ends it.

The result of a test case is sent to hive during the teardown of the `hive_test`
fixture. Fixtures depending on `hive_test`, such as the ones starting the clients, are
torn down before it, so their logs are part of the result.
"""

import json
import os
import warnings
from dataclasses import asdict
from pathlib import Path
from typing import Generator, List

import pytest
from hive.client import ClientRole
from hive.simulation import Simulation
from hive.testing import HiveTest, HiveTestResult, HiveTestSuite

from ..concurrency import SharedCounter
from ..logging import get_logger
from .hive_info import HiveInfo

logger = get_logger(__name__)


def pytest_addoption(parser: pytest.Parser):  # noqa: D103
    pytest_hive_group = parser.getgroup("pytest_hive", "Arguments related to pytest hive")
    pytest_hive_group.addoption(
        "--hive-simulator",
        action="store",
        dest="hive_simulator",
        default=os.environ.get("HIVE_SIMULATOR"),
        help=(
            "The Hive simulator endpoint, e.g. http://127.0.0.1:3000. By default, the value is "
            "taken from the HIVE_SIMULATOR environment variable."
        ),
    )


def pytest_configure(config):  # noqa: D103
    hive_simulator_url = config.getoption("hive_simulator")
    if hive_simulator_url is None:
        pytest.exit(
            "The HIVE_SIMULATOR environment variable is not set.\n\n"
            "If running locally, start hive in --dev mode, for example:\n"
            "./hive --dev --client go-ethereum\n\n"
            "and set the HIVE_SIMULATOR to the reported URL. For example, in bash:\n"
            "export HIVE_SIMULATOR=http://127.0.0.1:3000"
        )
    # The client types parametrize the tests, so they are needed before any fixture runs.
    config.hive_simulator_url = hive_simulator_url
    config.hive_simulator = Simulation(url=hive_simulator_url)
    try:
        config.hive_execution_clients = config.hive_simulator.client_types(
            role=ClientRole.ExecutionClient
        )
    except Exception as e:
        message = (
            f"Error connecting to hive simulator at {hive_simulator_url}.\n\n"
            "Did you forget to start hive in --dev mode?\n"
            "./hive --dev --client go-ethereum\n\n"
        )
        if config.option.verbose > 0:
            message += f"Error details:\n{str(e)}"
        else:
            message += "Re-run with -v for more details."
        pytest.exit(message)


def get_hive_info(simulator: Simulation) -> HiveInfo | None:
    """Fetch and return the hive instance information."""
    try:
        return HiveInfo(**simulator.hive_instance())
    except Exception as e:
        warnings.warn(
            f"Error fetching hive information: {str(e)}\n\n"
            "Hive might need to be updated to a newer version.",
            stacklevel=2,
        )
    return None


@pytest.hookimpl(trylast=True)
def pytest_report_header(config, start_path):
    """Add the hive instance to pytest's console output header."""
    if config.option.collectonly:
        return
    header_lines = [f"hive simulator: {config.hive_simulator_url}"]
    if hive_info := get_hive_info(config.hive_simulator):
        header_lines += hive_info.header_lines()
    return header_lines


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Make the setup, call and teardown reports available to the `hive_test` fixture as
    `result_setup`, `result_call` and `result_teardown`.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"result_{report.when}", report)


@pytest.fixture(scope="session")
def simulator(request) -> Simulation:
    """Return the hive simulator instance."""
    return request.config.hive_simulator


@pytest.fixture(scope="session")
def test_suite(
    simulator: Simulation,
    session_temp_folder: Path,
    test_suite_name: str,
    test_suite_description: str,
) -> Generator[HiveTestSuite, None, None]:
    """Start the hive test suite shared by all workers and end it after the last test."""
    suite_file = session_temp_folder / f"test_suite_{test_suite_name.replace('/', '_')}"
    users = SharedCounter(suite_file.with_name(f"{suite_file.name}_users"))
    with users.lock:
        if suite_file.exists():
            suite = HiveTestSuite(**json.loads(suite_file.read_text()))
        else:
            suite = simulator.start_suite(
                name=test_suite_name,
                description=test_suite_description,
            )
            suite_file.write_text(json.dumps(asdict(suite)))
        users.add(1)

    yield suite

    with users.lock:
        if users.add(-1) == 0:
            suite.end()
            suite_file.unlink()


def captured_output(node: pytest.Item) -> str:
    """Return the output captured in every phase of the test, setup output only once."""
    captured: List[str] = []
    setup_out = ""
    for phase in ("setup", "call", "teardown"):
        report = getattr(node, f"result_{phase}", None)
        if report is None:
            continue
        stdout = report.capstdout or "None"
        stderr = report.capstderr or "None"
        if phase == "setup":
            setup_out = stdout
        elif phase == "call" and stdout.startswith(setup_out):
            stdout = stdout[len(setup_out) :]
        captured.append(
            f"# Captured Output from Test {phase.capitalize()}\n\n"
            f"## stdout:\n{stdout}\n"
            f"## stderr:\n{stderr}\n"
        )
    return "\n".join(captured)


def hive_result(node: pytest.Item) -> HiveTestResult:
    """Return the hive result of the test from its pytest reports."""
    output = captured_output(node)
    for phase, label in (("setup", "setup"), ("call", ""), ("teardown", "teardown")):
        report = getattr(node, f"result_{phase}", None)
        if report is not None and not report.passed:
            failure = f"Test {label} failed." if label else "Test failed."
            return HiveTestResult(
                test_pass=False,
                details=f"{failure}\n\n{report.longreprtext}\n{output}",
            )
    if getattr(node, "result_call", None) is None:
        return HiveTestResult(
            test_pass=False,
            details="Test failed for unknown reason (call status unknown).\n\n" + output,
        )
    return HiveTestResult(test_pass=True, details="Test passed.\n\n" + output)


@pytest.fixture(scope="function")
def hive_test(request, test_suite: HiveTestSuite) -> Generator[HiveTest, None, None]:
    """Start the hive test of the pytest test case and end it with the test's result."""
    try:
        test_case_description = request.getfixturevalue("test_case_description")
    except pytest.FixtureLookupError:
        pytest.exit(
            "Error: The 'test_case_description' fixture has not been defined by the simulator "
            "or pytest plugin using this plugin!"
        )

    test: HiveTest = test_suite.start_test(
        name=request.node.name,
        description=test_case_description,
    )
    yield test

    try:
        result = hive_result(request.node)
    except Exception as e:
        logger.verbose(f"Error processing logs for test {request.node.nodeid}: {str(e)}")
        result = HiveTestResult(
            test_pass=False, details=f"Exception whilst processing test result: {str(e)}"
        )
    test.end(result=result)
    logger.verbose(f"Finished processing logs for test: {request.node.nodeid}")
