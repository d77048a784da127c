"""Base classes and utilities for pytest-based CLI commands."""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from os.path import realpath
from pathlib import Path
from typing import Any, Callable, List

import click
import pytest
from rich.console import Console

CURRENT_FOLDER = Path(realpath(__file__)).parent
PACKAGE_INSTALL_FOLDER = CURRENT_FOLDER.parent.parent
PYTEST_INI_FOLDER = CURRENT_FOLDER / "pytest_ini_files"


@dataclass
class PytestExecution:
    """Configuration for a single pytest execution."""

    config_file: Path
    """Path to the pytest configuration file (e.g., 'pytest-engine-blobs.ini')."""

    command_logic_test_paths: List[Path] = field(default_factory=list)
    """Test modules, relative to the package, that implement the command."""

    args: List[str] = field(default_factory=list)
    """Arguments to pass to pytest."""


class ArgumentProcessor(ABC):
    """Base class for processing command-line arguments."""

    @abstractmethod
    def process_args(self, args: List[str]) -> List[str]:
        """Process the given arguments and return modified arguments."""
        pass


@dataclass(kw_only=True)
class PytestRunner:
    """Handles execution of pytest commands."""

    console: Console = field(default_factory=lambda: Console(highlight=False))
    """Console to use for output."""

    def pytest_args(self, execution: PytestExecution) -> List[str]:
        """Return the arguments pytest is invoked with."""
        return (
            ["-c", str(execution.config_file), "--rootdir", str(PACKAGE_INSTALL_FOLDER)]
            + [
                str(PACKAGE_INSTALL_FOLDER / test_path)
                for test_path in execution.command_logic_test_paths
            ]
            + execution.args
        )

    def run(self, execution: PytestExecution) -> int:
        """Run pytest once with the given configuration and arguments."""
        pytest_args = self.pytest_args(execution)
        if self._is_verbose(execution.args):
            pytest_cmd = f"pytest {' '.join(pytest_args)}"
            self.console.print(f"Executing: [bold]{pytest_cmd}[/bold]")
        return pytest.main(pytest_args)

    def _is_verbose(self, args: List[str]) -> bool:
        """Check if verbose output is requested."""
        return any(arg in ["-v", "--verbose", "-vv", "-vvv"] for arg in args)


@dataclass(kw_only=True)
class PytestCommand:
    """
    Base class for pytest-based CLI commands.

    Runs pytest with the command's configuration file on the command's test modules,
    after passing the user's arguments through the argument processors.
    """

    config_file: str
    """File name of the pytest configuration file (e.g., 'pytest-engine-blobs.ini')."""

    argument_processors: List[ArgumentProcessor] = field(default_factory=list)
    """Processors to apply to the pytest arguments."""

    runner: PytestRunner = field(default_factory=PytestRunner)
    """Runner to execute the pytest command."""

    plugins: List[str] = field(default_factory=list)
    """Plugins to load for the pytest command."""

    command_logic_test_paths: List[Path] = field(default_factory=list)
    """Path to test files that contain the command logic."""

    pytest_ini_folder: Path = PYTEST_INI_FOLDER
    """Folder where the pytest configuration files are located."""

    @property
    def config_path(self) -> Path:
        """Path to the pytest configuration file."""
        return self.pytest_ini_folder / self.config_file

    def create_execution(self, pytest_args: List[str]) -> PytestExecution:
        """Create the pytest execution of the command."""
        return PytestExecution(
            config_file=self.config_path,
            command_logic_test_paths=self.command_logic_test_paths,
            args=self.process_arguments(pytest_args),
        )

    def execute(self, pytest_args: List[str]) -> None:
        """Execute the command with the given pytest arguments and exit with its result."""
        sys.exit(self.runner.run(self.create_execution(pytest_args)))

    def process_arguments(self, args: List[str]) -> List[str]:
        """Apply all argument processors to the given arguments."""
        processed_args = list(args)

        for processor in self.argument_processors:
            processed_args = processor.process_args(processed_args)

        for plugin in self.plugins:
            processed_args.extend(["-p", plugin])

        return processed_args


def common_pytest_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Apply common Click options for pytest-based commands.

    This decorator adds the standard help options that all pytest commands use.
    """
    func = click.option(
        "-h",
        "--help",
        "help_flag",
        is_flag=True,
        default=False,
        expose_value=True,
        help="Show help message.",
    )(func)

    func = click.option(
        "--pytest-help",
        "pytest_help_flag",
        is_flag=True,
        default=False,
        expose_value=True,
        help="Show pytest's help message.",
    )(func)

    return click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)(func)
