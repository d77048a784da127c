"""CLI entry point for the `engine-blobs` pytest-based command."""

from pathlib import Path
from typing import List

import click

from .base import PytestCommand, common_pytest_options
from .processors import HelpFlagsProcessor, HiveEnvironmentProcessor

SIMULATOR_TEST_PATH = Path("pytest_plugins/blobs/simulator/test_engine_blobs.py")


def create_engine_blobs_command() -> PytestCommand:
    """Initialize the engine-blobs command with its test module and processors."""
    return PytestCommand(
        config_file="pytest-engine-blobs.ini",
        argument_processors=[
            HelpFlagsProcessor("engine-blobs"),
            HiveEnvironmentProcessor(),
        ],
        command_logic_test_paths=[SIMULATOR_TEST_PATH],
    )


@click.command(
    name="engine-blobs",
    context_settings={"ignore_unknown_options": True},
)
@common_pytest_options
def engine_blobs(pytest_args: List[str], **kwargs) -> None:
    """Run the Engine API blob scenarios against the execution clients of a hive simulator."""
    create_engine_blobs_command().execute(list(pytest_args))
