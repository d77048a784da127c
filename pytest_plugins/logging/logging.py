"""
Logging for the blob simulator, usable standalone or as a pytest plugin.

Records written to pytest's captured output carry no timestamp by default, yet that output
is what hive shows as the simulator log of a failed test, and it has to be lined up
against the client logs. Every handler installed here therefore stamps records with UTC
milliseconds.

Two levels are added to the standard ones: `VERBOSE` (15) for block production and RPC
detail, and `FAIL` (35) for step failures.
"""

import functools
import logging
import os
import sys
from datetime import datetime, timezone
from logging import LogRecord
from pathlib import Path
from typing import Any, ClassVar, Optional, Union, cast

import pytest
from _pytest.terminal import TerminalReporter

file_handler: Optional[logging.FileHandler] = None

VERBOSE_LEVEL = 15  # Between DEBUG (10) and INFO (20)
FAIL_LEVEL = 35  # Between WARNING (30) and ERROR (40)

logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")
logging.addLevelName(FAIL_LEVEL, "FAIL")

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DIRECTORY = Path("logs")


class BlobTestLogger(logging.Logger):
    """Logger class exposing the `VERBOSE` and `FAIL` levels as methods."""

    def verbose(
        self,
        msg: object,
        *args: Any,
        exc_info: Union[BaseException, bool, None] = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log a message at `VERBOSE` level, more detailed than INFO but less than DEBUG."""
        if self.isEnabledFor(VERBOSE_LEVEL):
            self._log(VERBOSE_LEVEL, msg, args, exc_info, extra, stack_info, stacklevel)

    def fail(
        self,
        msg: object,
        *args: Any,
        exc_info: Union[BaseException, bool, None] = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log a message at `FAIL` level, used when a test step fails."""
        if self.isEnabledFor(FAIL_LEVEL):
            self._log(FAIL_LEVEL, msg, args, exc_info, extra, stack_info, stacklevel)


logging.setLoggerClass(BlobTestLogger)


def get_logger(name: str) -> BlobTestLogger:
    """Get a logger typed with the VERBOSE and FAIL levels."""
    return cast(BlobTestLogger, logging.getLogger(name))


logger = get_logger(__name__)


class UTCFormatter(logging.Formatter):
    """Log formatter that formats UTC timestamps with milliseconds and +00:00 suffix."""

    def formatTime(self, record, datefmt=None):  # noqa: D102,N802  # camelcase required
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3] + "+00:00"


class ColorFormatter(UTCFormatter):
    """Formatter that colours the level name, except inside a Docker container."""

    running_in_docker: ClassVar[bool] = Path("/.dockerenv").exists()

    COLORS = {
        logging.DEBUG: "\033[37m",  # Gray
        VERBOSE_LEVEL: "\033[36m",  # Cyan
        logging.INFO: "\033[36m",  # Cyan
        logging.WARNING: "\033[33m",  # Yellow
        FAIL_LEVEL: "\033[35m",  # Magenta
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[41m",  # Red background
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        """Format a copy of the record with a coloured level name."""
        record_copy = logging.makeLogRecord(record.__dict__)
        if not self.running_in_docker:
            color = self.COLORS.get(record_copy.levelno, self.RESET)
            record_copy.levelname = f"{color}{record_copy.levelname}{self.RESET}"
        return super().format(record_copy)


class LogLevel:
    """Parse a log level given on the command line."""

    @classmethod
    def from_cli(cls, value: str) -> int:
        """Accept a level name in any case (`info`, `VERBOSE`) or a number."""
        try:
            return int(value)
        except ValueError:
            pass

        level_name = value.upper()
        if level_name in logging._nameToLevel:
            return logging._nameToLevel[level_name]

        valid = ", ".join(logging._nameToLevel.keys())
        raise ValueError(f"Invalid log level '{value}'. Expected one of: {valid} or a number.")


def configure_logging(
    log_level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_to_stdout: bool = True,
    log_format: str = DEFAULT_LOG_FORMAT,
    use_color: Optional[bool] = None,
) -> Optional[logging.FileHandler]:
    """
    Replace the handlers of the root logger with the simulator's handlers.

    Args:
        log_level: The logging level to use (name or numeric value)
        log_file: Path to the log file (if None, no file logging is set up)
        log_to_stdout: Whether to log to stdout
        log_format: The log format string
        use_color: Whether to use colors in stdout output (auto-detected if None)

    Returns:
        The file handler if log_file is provided, otherwise None

    """
    root_logger = logging.getLogger()

    if isinstance(log_level, str):
        log_level = LogLevel.from_cli(log_level)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler_instance = None
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(exist_ok=True, parents=True)
        file_handler_instance = logging.FileHandler(log_path, mode="w")
        file_handler_instance.setFormatter(UTCFormatter(fmt=log_format))
        root_logger.addHandler(file_handler_instance)

    if log_to_stdout:
        stream_handler = logging.StreamHandler(sys.stdout)
        if use_color is None:
            use_color = not ColorFormatter.running_in_docker
        formatter_class = ColorFormatter if use_color else UTCFormatter
        stream_handler.setFormatter(formatter_class(fmt=log_format))
        root_logger.addHandler(stream_handler)

    logger.verbose("Logging configured successfully.")
    return file_handler_instance


def pytest_addoption(parser):  # noqa: D103
    logging_group = parser.getgroup(
        "logging", "Arguments related to logging from the blob simulator fixtures and steps."
    )
    logging_group.addoption(
        "--blob-log-level",  # --log-level is defined by pytest's built-in logging
        "--blobloglevel",
        action="store",
        default="INFO",
        type=LogLevel.from_cli,
        dest="blob_log_level",
        help=(
            "The logging level to use in the test session: DEBUG, VERBOSE, INFO, WARNING, "
            "FAIL, ERROR or CRITICAL, default - INFO. An integer in [0, 50] may be also "
            "provided."
        ),
    )


@functools.cache
def get_log_stem(argv0: str, argv1: Optional[str]) -> str:
    """Return `<program>[-<subcommand>]-<utc timestamp>`, the common prefix of the log files."""
    stem = Path(argv0).stem
    prefix = "pytest" if stem in ("", "-c", "__main__") else stem
    subcommand = argv1 if argv1 and not argv1.startswith("-") else None
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")

    name_parts = [prefix]
    if subcommand:
        name_parts.append(subcommand)
    name_parts.append(timestamp)
    return "-".join(name_parts)


def _argv_subcommand() -> Optional[str]:
    return sys.argv[1] if len(sys.argv) > 1 else None


def pytest_configure_node(node):
    """Share the log file stem of the main process with an xdist worker."""
    node.workerinput["log_stem"] = get_log_stem(sys.argv[0], _argv_subcommand())


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    """
    Configure logging for the session, with one log file per xdist worker.

    Workers receive the stem computed by the main process so that all the files of one
    session share the same timestamp.
    """
    global file_handler

    log_stem = getattr(config, "workerinput", {}).get("log_stem") or get_log_stem(
        sys.argv[0], _argv_subcommand()
    )
    worker_id = os.getenv("PYTEST_XDIST_WORKER", "main")
    LOG_DIRECTORY.mkdir(exist_ok=True)
    log_file_path = LOG_DIRECTORY / f"{log_stem}-{worker_id}.log"
    config.option.blob_log_file_path = log_file_path

    file_handler = configure_logging(
        log_level=config.getoption("blob_log_level"),
        log_file=log_file_path,
        log_to_stdout=True,
    )


def pytest_report_header(config: pytest.Config) -> list[str]:
    """Show the log file path in the test session header."""
    if blob_log_file_path := config.option.blob_log_file_path:
        return [f"Log file: {blob_log_file_path}"]
    return []


def pytest_terminal_summary(terminalreporter: TerminalReporter, exitstatus: int) -> None:
    """Repeat the log file path at the end of the terminal summary."""
    if terminalreporter.config.option.collectonly:
        return
    if blob_log_file_path := terminalreporter.config.option.blob_log_file_path:
        terminalreporter.write_sep("-", f"Log file: {blob_log_file_path.resolve()}", yellow=True)


def log_only_to_file(level: int, msg: str, *args) -> None:
    """Write a record to the session log file without echoing it to stdout."""
    if not file_handler:
        return
    file_logger = logging.getLogger(__name__)
    if not file_logger.isEnabledFor(level):
        return
    record: LogRecord = file_logger.makeRecord(
        file_logger.name,
        level,
        fn=__file__,
        lno=0,
        msg=msg,
        args=args,
        exc_info=None,
        func=None,
        extra=None,
    )
    file_handler.handle(record)


def report_outcome(report: pytest.TestReport) -> tuple[str, int]:
    """Return the outcome label of a test report and the level it is logged at."""
    if hasattr(report, "wasxfail"):
        if report.skipped:
            return "XFAIL", logging.INFO
        if report.passed:
            return "XPASS", logging.WARNING
        return "XFAIL ERROR", logging.ERROR
    if report.skipped:
        return "SKIPPED", logging.INFO
    if report.failed:
        return "FAILED", FAIL_LEVEL
    return "PASSED", logging.INFO


def pytest_runtest_logstart(nodeid: str, location: tuple[str, int, str]) -> None:
    """Log test start to file."""
    log_only_to_file(logging.INFO, f"START TEST: {nodeid}")


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    """Log the outcome and duration of the test call to file."""
    if report.when != "call":
        return
    status, log_level = report_outcome(report)
    log_only_to_file(log_level, f"{status} in {report.duration:.2f}s: {report.nodeid}")


def pytest_runtest_logfinish(nodeid: str, location: tuple[str, int, str]) -> None:
    """Log end of test to file."""
    log_only_to_file(logging.INFO, f"END TEST: {nodeid}")
