"""Test the construction and corruption of versioned hash lists."""

from typing import List

import pytest

from ..blob_types import BlobGenerator
from ..versioned_hashes import CorruptionMode, VersionedHashes


@pytest.fixture
def generator() -> BlobGenerator:
    """Return a stand-in blob generator."""
    return BlobGenerator()


def test_render_canonical(generator: BlobGenerator):
    """Test rendering a list with the default version."""
    rendered = VersionedHashes(blobs=[0, 1]).render(generator)
    assert rendered == [generator.versioned_hash(0), generator.versioned_hash(1)]


def test_render_nil_and_empty_are_distinct(generator: BlobGenerator):
    """Test that a missing list and an empty list render differently."""
    assert VersionedHashes(blobs=None).render(generator) is None
    assert VersionedHashes(blobs=[]).render(generator) == []


def test_render_version_overrides(generator: BlobGenerator):
    """Test that positions without an override keep the default version."""
    rendered = VersionedHashes(blobs=[0, 1, 2], hash_versions=[1, 2]).render(generator)
    assert rendered is not None
    assert [h[0] for h in rendered] == [1, 2, 1]
    assert rendered[1][1:] == generator.versioned_hash(1)[1:]


@pytest.mark.parametrize(
    "mode,expected_blobs,expected_versions",
    [
        (CorruptionMode.MISSING, [0], None),
        (CorruptionMode.EXTRA, [0, 1, 2], None),
        (CorruptionMode.OUT_OF_ORDER, [1, 0], None),
        (CorruptionMode.REPEATED, [0, 1, 1], None),
        (CorruptionMode.INCORRECT_HASH, [0, 2], None),
        (CorruptionMode.INCORRECT_VERSION, [0, 1], [1, 2]),
        (CorruptionMode.NIL, None, None),
        (CorruptionMode.EMPTY, [], None),
    ],
)
def test_corruption_modes(
    generator: BlobGenerator,
    mode: CorruptionMode,
    expected_blobs: List[int] | None,
    expected_versions: List[int] | None,
):
    """Test every corruption of a two-blob payload."""
    corrupted = VersionedHashes.from_corruption(mode, [0, 1], unrelated=2)
    assert corrupted.blobs == expected_blobs
    assert corrupted.hash_versions == expected_versions
    canonical = VersionedHashes(blobs=[0, 1]).render(generator)
    assert corrupted.render(generator) != canonical


def test_extra_on_empty_payload():
    """Test that a non-empty list can be built for a payload without blobs."""
    assert VersionedHashes.from_corruption(CorruptionMode.EXTRA, [], unrelated=0).blobs == [0]


@pytest.mark.parametrize(
    "mode,included",
    [
        (CorruptionMode.MISSING, []),
        (CorruptionMode.EMPTY, []),
        (CorruptionMode.OUT_OF_ORDER, [0]),
        (CorruptionMode.INCORRECT_VERSION, []),
    ],
)
def test_corruption_that_would_be_canonical(mode: CorruptionMode, included: List[int]):
    """Test that a corruption that cannot alter the input is refused."""
    with pytest.raises(ValueError):
        VersionedHashes.from_corruption(mode, included, unrelated=5)


def test_unrelated_blob_must_not_be_included():
    """Test that the unrelated blob is checked against the payload."""
    with pytest.raises(ValueError):
        VersionedHashes.from_corruption(CorruptionMode.INCORRECT_HASH, [0, 1], unrelated=1)


def test_description():
    """Test the description used in logs."""
    assert VersionedHashes(blobs=None).description == "nil"
    assert str(VersionedHashes(blobs=[0, 1])) == "blobs=[0, 1]"
    assert VersionedHashes(blobs=[0], hash_versions=[2]).description == "blobs=[0] versions=[2]"
