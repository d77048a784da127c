"""
Pytest plugin providing a temporary folder shared by all the xdist workers of a session.

The hive plugin keeps a single hive test suite in this folder so that the blob scenarios
run by every worker are reported under the same suite.
"""

import shutil
from pathlib import Path
from tempfile import gettempdir as get_temp_dir  # noqa: SC200
from typing import Generator

import pytest
from filelock import FileLock


class SharedCounter:
    """
    A counter stored in a file and guarded by a file lock, so that it can be shared by
    several processes.
    """

    path: Path
    lock: FileLock

    def __init__(self, path: Path):
        """Initialize the counter stored at `path`, counting from zero if it is missing."""
        self.path = path
        self.lock = FileLock(path.with_name(f"{path.name}.lock"))

    def _read(self) -> int:
        if not self.path.exists():
            return 0
        return int(self.path.read_text())

    def add(self, value: int) -> int:
        """Add `value` to the counter and return the new count; must hold `lock`."""
        count = self._read() + value
        if count == 0:
            self.path.unlink(missing_ok=True)
        else:
            self.path.write_text(str(count))
        return count

    def increment(self) -> int:
        """Add one user and return the number of users."""
        with self.lock:
            return self.add(1)

    def decrement(self) -> int:
        """Remove one user and return the number of remaining users."""
        with self.lock:
            return self.add(-1)


@pytest.fixture(scope="session")
def session_temp_folder_name(testrun_uid: str) -> str:  # noqa: SC200
    """
    Define the name of the folder shared by the xdist workers.

    `testrun_uid` is provided by xdist and is the same for every worker of a run.
    """
    return f"engine-blobs-{testrun_uid}"  # noqa: SC200


@pytest.fixture(scope="session")
def session_temp_folder(session_temp_folder_name: str) -> Generator[Path, None, None]:
    """
    Create the folder shared by the xdist workers and delete it once the last worker is
    done with it.
    """
    folder = Path(get_temp_dir()) / session_temp_folder_name
    folder.mkdir(exist_ok=True)
    users = SharedCounter(folder / "folder_users")
    users.increment()

    yield folder

    with users.lock:
        if users.add(-1) == 0:
            shutil.rmtree(folder)
