"""Blob test cases: a named sequence of steps run against one context."""

from dataclasses import dataclass, field
from typing import List

from blob_test_forks import Fork, ForkSchedule
from pytest_plugins.logging import get_logger

from .context import BlobTestContext
from .exceptions import TRANSLATED_ERRORS, translate_error
from .steps import TestStep, describe, execute

logger = get_logger(__name__)


@dataclass
class BlobsBaseSpec:
    """
    A blob test case.

    `blobs_fork_height`, `time_increments` and `get_payload_delay` override the simulator
    options when set. `blobs_fork_height` is the number of the first block of the blob
    fork; the fork is scheduled at the timestamp that block gets, with genesis at
    timestamp zero.
    """

    name: str
    about: str = ""
    steps: List[TestStep] = field(default_factory=list)
    blobs_fork_height: int | None = None
    time_increments: int | None = None
    get_payload_delay: float | None = None

    def fork_schedule(
        self,
        fork: Fork,
        default_time_increments: int = 1,
        default_blobs_fork_height: int = 0,
    ) -> ForkSchedule:
        """Return the schedule activating `fork` at the blob fork height."""
        time_increments = (
            self.time_increments if self.time_increments is not None else default_time_increments
        )
        blobs_fork_height = (
            self.blobs_fork_height
            if self.blobs_fork_height is not None
            else default_blobs_fork_height
        )
        return ForkSchedule(fork, activation_timestamp=blobs_fork_height * time_increments)

    def execute(self, ctx: BlobTestContext, ttd_timeout: float) -> None:
        """
        Run the steps in order against the context.

        The first failing step aborts the test case with a `BlobTestError` naming it.
        """
        try:
            ctx.clmock.wait_for_ttd(ttd_timeout)
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, 0, "Wait for the clients to accept the genesis") from e

        if self.get_payload_delay is not None:
            ctx.clmock.payload_production_client_delay = self.get_payload_delay
        if self.time_increments is not None:
            ctx.clmock.time_increments = self.time_increments

        for step_index, step in enumerate(self.steps, start=1):
            description = describe(step)
            logger.info(f"Executing step {step_index}: {description}")
            try:
                execute(step, ctx)
            except TRANSLATED_ERRORS as e:
                raise translate_error(e, step_index, description) from e
        logger.info(
            f"{self.name}: {len(self.steps)} steps executed, "
            f"{len(ctx.pool)} blob transactions sent"
        )
