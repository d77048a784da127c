"""Argument processors of the `engine-blobs` command."""

import os
import warnings
from typing import List

import click

from .base import ArgumentProcessor


class HelpFlagsProcessor(ArgumentProcessor):
    """Processes help-related flags to provide cleaner help output."""

    def __init__(self, command_type: str):
        """
        Initialize the help processor.

        Args:
            command_type: The name of the command, e.g. "engine-blobs".

        """
        self.command_type = command_type

    def process_args(self, args: List[str]) -> List[str]:
        """
        Replace the help flags of the command with pytest flags.

        `--help` only lists the options of the blob simulator, since `pytest --help` lists
        every flag of pytest and of its plugins.
        """
        ctx = click.get_current_context()

        if ctx.params.get("help_flag"):
            return [f"--{self.command_type}-help"]
        elif ctx.params.get("pytest_help_flag"):
            return ["--help"]

        return args


class HiveEnvironmentProcessor(ArgumentProcessor):
    """Converts the environment hive runs the simulator with into pytest flags."""

    def process_args(self, args: List[str]) -> List[str]:
        """Convert hive environment variables into pytest flags."""
        modified_args = list(args)

        hive_test_pattern = os.getenv("HIVE_TEST_PATTERN")
        if hive_test_pattern and "--sim.limit" not in args:
            modified_args.extend(["--sim.limit", hive_test_pattern])

        hive_parallelism = os.getenv("HIVE_PARALLELISM")
        if hive_parallelism not in [None, "", "1"] and "-n" not in args:
            modified_args.extend(["-n", str(hive_parallelism)])

        if os.getenv("HIVE_RANDOM_SEED") is not None:
            warnings.warn("HIVE_RANDOM_SEED is not yet supported.", stacklevel=2)

        if os.getenv("HIVE_LOGLEVEL") is not None:
            warnings.warn("HIVE_LOGLEVEL is not yet supported.", stacklevel=2)

        return modified_args
