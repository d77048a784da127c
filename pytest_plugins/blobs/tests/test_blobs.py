"""
Test the scenario selection, blob commitments and timing helpers of the blobs plugin.
"""

from pathlib import Path

import pytest

from blob_test_types import StandInCommitmentScheme

from .. import blobs
from ..blobs import SimLimitBehavior, kzg_blob_generator
from ..timing import TimingData


@pytest.mark.parametrize(
    "sim_limit,name,selected",
    [
        (".*", "Replace Blob Transactions", True),
        ("Ordering", "Blob Transaction Ordering, Single Account", True),
        ("Ordering", "Replace Blob Transactions", False),
        (
            "id:NewPayloadV3 Versioned Hashes, Missing Hash (Syncing)",
            "NewPayloadV3 Versioned Hashes, Missing Hash (Syncing)",
            True,
        ),
        (
            "id:NewPayloadV3 Versioned Hashes, Missing Hash (Syncing)",
            "NewPayloadV3 Versioned Hashes, Missing Hash",
            False,
        ),
    ],
)
def test_sim_limit_matches(sim_limit: str, name: str, selected: bool):
    """Literal ids escape the regex characters of the scenario names."""
    assert SimLimitBehavior.from_string(sim_limit).matches(name) is selected


def test_sim_limit_collectonly():
    """The `collectonly` prefix lists the matched test cases."""
    behavior = SimLimitBehavior.from_string("collectonly")
    assert behavior.collectonly
    assert behavior.matches("anything")

    behavior = SimLimitBehavior.from_string("collectonly:id:Replace (x)")
    assert behavior.collectonly
    assert behavior.matches("Replace (x)")
    assert not behavior.matches("Replace x")


def test_sim_limit_empty_id():
    """An empty literal id is rejected."""
    with pytest.raises(ValueError):
        SimLimitBehavior.from_string("id:")


def test_timing_data_formatted():
    """Sub-phases are indented under their parent."""
    with TimingData("Total") as total:
        with total.time("Start client"):
            pass
        unfinished = total.time("Stop client")
    assert total.duration is not None
    assert unfinished.duration is None
    lines = total.formatted(precision=2).splitlines()
    assert lines[0].startswith("Total: ")
    assert lines[1].startswith("  Start client: ")
    assert lines[2] == "  Stop client: unfinished"


class RecordingKZGScheme(StandInCommitmentScheme):
    """Stands in for the ckzg scheme and records the trusted setup it was given."""

    name = "recording"
    trusted_setups: list = []

    def __init__(self, trusted_setup_path=None):
        """Record the trusted setup path."""
        self.trusted_setups.append(trusted_setup_path)


@pytest.mark.parametrize("trusted_setup", [None, Path("/setup/trusted_setup.txt")])
def test_simulator_blobs_use_kzg_commitments(
    monkeypatch: pytest.MonkeyPatch, trusted_setup: Path | None
):
    """The simulator commits with ckzg whether or not a trusted setup path is given."""
    monkeypatch.setattr(blobs, "CKZGCommitmentScheme", RecordingKZGScheme)
    monkeypatch.setattr(RecordingKZGScheme, "trusted_setups", [])
    generator = kzg_blob_generator(trusted_setup)
    assert isinstance(generator.scheme, RecordingKZGScheme)
    assert RecordingKZGScheme.trusted_setups == [trusted_setup]
