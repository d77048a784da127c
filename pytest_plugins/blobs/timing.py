"""
Durations of the phases of a blob test case.
"""

import time
from typing import List


class TimingData:
    """
    The time taken by a phase of a test case and by its sub-phases, in seconds.
    """

    name: str
    start_time: float | None
    end_time: float | None
    parent: "TimingData | None"
    timings: "List[TimingData]"

    def __init__(self, name: str, parent: "TimingData | None" = None):
        """Initialize the timing of the phase `name`."""
        self.name = name
        self.start_time = None
        self.end_time = None
        self.parent = parent
        self.timings = []

    def __enter__(self) -> "TimingData":
        """Start timing the phase."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        """Stop timing the phase, whether it succeeded or not."""
        self.end_time = time.perf_counter()

    @property
    def duration(self) -> float | None:
        """Return the duration of the phase, or None if it did not finish."""
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def time(self, sub_name: str) -> "TimingData":
        """Return the timing of a new sub-phase."""
        new_timing = TimingData(sub_name, self)
        self.timings.append(new_timing)
        return new_timing

    def formatted(self, precision: int = 4, indent: int = 0) -> str:
        """Format the phase and its sub-phases, one per line, indented by depth."""
        duration = self.duration
        rendered = "unfinished" if duration is None else f"{duration:.{precision}f}"
        formatted = f"{' ' * indent}{self.name}: {rendered}\n"
        for timing in self.timings:
            formatted += timing.formatted(precision, indent + 2)
        return formatted
