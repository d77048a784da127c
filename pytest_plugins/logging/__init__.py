"""Import the logging module content to make it available from pytest_plugins.logging."""

from .logging import (
    FAIL_LEVEL,
    VERBOSE_LEVEL,
    BlobTestLogger,
    ColorFormatter,
    LogLevel,
    UTCFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "VERBOSE_LEVEL",
    "FAIL_LEVEL",
    "BlobTestLogger",
    "UTCFormatter",
    "ColorFormatter",
    "LogLevel",
    "get_logger",
    "configure_logging",
]
