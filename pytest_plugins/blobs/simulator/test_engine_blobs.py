"""
A hive based simulator that runs the Engine API blob scenarios against execution clients.

Each scenario drives the clients with a CL mock: blob transactions are sent to the
clients, payloads are built and checked against the blobs they must include, and
modified payloads are sent to check that the clients reject them.
"""

from blob_test_steps import BlobsBaseSpec, BlobTestContext
from pytest_plugins.logging import get_logger

from ..timing import TimingData

logger = get_logger(__name__)


def test_blobs_via_engine(
    timing_data: TimingData,
    blob_test_context: BlobTestContext,
    blob_scenario: BlobsBaseSpec,
    ttd_timeout: float,
):
    """
    1. Wait for the clients to accept the genesis as their head.
    2. Execute the steps of the scenario in order; the first failing step fails the test.
    """
    logger.info(f"Running '{blob_scenario.name}' on {blob_test_context.fork_schedule}")
    with timing_data.time(f"{len(blob_scenario.steps)} steps"):
        blob_scenario.execute(blob_test_context, ttd_timeout=ttd_timeout)
