"""Helpers to resolve forks and fork activations."""

from dataclasses import dataclass
from typing import Dict, List

from .base_fork import BaseFork, Fork
from .forks import forks


class InvalidForkError(Exception):
    """Invalid fork error raised when the fork specified is not found or incompatible."""

    def __init__(self, message):
        """Initialize the InvalidForkError exception."""
        super().__init__(message)


all_forks: List[Fork] = []
for fork_name in forks.__dict__:
    fork = forks.__dict__[fork_name]
    if not isinstance(fork, type):
        continue
    if issubclass(fork, BaseFork) and fork is not BaseFork:
        all_forks.append(fork)


def get_forks() -> List[Fork]:
    """Return the list of all the forks that can be selected, ordered chronologically."""
    return [fork for fork in all_forks if not fork.ignore()]


def get_blob_forks() -> List[Fork]:
    """Return the list of forks that support blob transactions."""
    return [fork for fork in get_forks() if fork.supports_blobs()]


def get_fork_by_name(fork_name: str) -> Fork:
    """Return the fork with the given name, case insensitive."""
    for fork in get_forks():
        if fork.name().lower() == fork_name.lower():
            return fork
    raise InvalidForkError(
        f"Unknown fork '{fork_name}', expected one of: "
        f"{', '.join(fork.name() for fork in get_forks())}"
    )


@dataclass(frozen=True)
class ForkSchedule:
    """
    Activation of a fork at a given timestamp on top of its parent.

    Every fork before `fork.parent()` is active at genesis.
    """

    fork: Fork
    activation_timestamp: int = 0

    def fork_at(self, timestamp: int) -> Fork:
        """Return the fork active at the given timestamp."""
        if timestamp >= self.activation_timestamp:
            return self.fork
        parent = self.fork.parent()
        if parent is None:
            raise InvalidForkError(f"{self.fork} has no parent active before its activation")
        return parent

    def hive_environment(self) -> Dict[str, str]:
        """Return the hive environment variables as strings, as hive expects them."""
        return {
            k: f"{v:d}" for k, v in self.fork.hive_environment(self.activation_timestamp).items()
        }

    def __str__(self) -> str:
        """Return a readable description of the schedule."""
        if self.activation_timestamp == 0:
            return f"{self.fork}"
        return f"{self.fork.parent()}To{self.fork}AtTime{self.activation_timestamp}"
