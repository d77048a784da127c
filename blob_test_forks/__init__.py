"""
Fork definitions for the blob suite.
"""

from .base_fork import BaseFork, BlobGasPriceCalculator, ExcessBlobGasCalculator, Fork
from .forks.forks import Cancun, Paris, Prague, Shanghai
from .forks.helpers import ceiling_division, fake_exponential
from .helpers import (
    ForkSchedule,
    InvalidForkError,
    get_blob_forks,
    get_fork_by_name,
    get_forks,
)

__all__ = [
    "BaseFork",
    "BlobGasPriceCalculator",
    "Cancun",
    "ExcessBlobGasCalculator",
    "Fork",
    "ForkSchedule",
    "InvalidForkError",
    "Paris",
    "Prague",
    "Shanghai",
    "ceiling_division",
    "fake_exponential",
    "get_blob_forks",
    "get_fork_by_name",
    "get_forks",
]
