"""Test suite for blobs."""

from pathlib import Path

import pytest
import requests

from blob_test_base_types import Bytes, KZGCommitment, KZGProof

from ..blob_types import (
    BLS_MODULUS,
    BYTES_PER_BLOB,
    BYTES_PER_FIELD_ELEMENT,
    VERSIONED_HASH_VERSION_KZG,
    BlobGenerator,
    CommitmentScheme,
    fetch_trusted_setup,
    generate_blob_data,
    kzg_to_versioned_hash,
)


class CountingScheme(CommitmentScheme):
    """Cacheable scheme that counts how many commitments it computed."""

    name = "counting"
    cacheable = True

    def __init__(self):
        """Start counting from zero."""
        self.computed = 0

    def commitment(self, data: Bytes) -> KZGCommitment:
        """Return the first 48 bytes of the content."""
        self.computed += 1
        return KZGCommitment(data[:48])

    def proof(self, data: Bytes, commitment: KZGCommitment) -> KZGProof:
        """Return the last 48 bytes of the content."""
        return KZGProof(data[-48:])


@pytest.mark.parametrize("blob_id", [0, 1, 42])
def test_blob_content_is_deterministic(blob_id: int):
    """Test that the same ID always yields the same content and commitment."""
    first = BlobGenerator().blob(blob_id)
    second = BlobGenerator().blob(blob_id)
    assert first.data == second.data
    assert first.commitment == second.commitment
    assert first.proof == second.proof
    assert len(first.data) == BYTES_PER_BLOB


def test_blob_field_elements_are_canonical():
    """Test that every field element is below the BLS modulus."""
    data = generate_blob_data(3)
    for i in range(0, len(data), BYTES_PER_FIELD_ELEMENT):
        assert int.from_bytes(data[i : i + BYTES_PER_FIELD_ELEMENT], "big") < BLS_MODULUS


def test_distinct_ids_have_distinct_commitments():
    """Test that two blob IDs never share a commitment."""
    generator = BlobGenerator()
    commitments = {generator.blob(blob_id).commitment for blob_id in range(10)}
    assert len(commitments) == 10


def test_versioned_hash():
    """Test the versioned hash derivation from a commitment."""
    commitment = KZGCommitment(b"\x01" * 48)
    versioned_hash = kzg_to_versioned_hash(commitment)
    assert versioned_hash[0] == VERSIONED_HASH_VERSION_KZG
    assert versioned_hash[1:] == Bytes(commitment).sha256()[1:]
    assert kzg_to_versioned_hash(commitment, 2)[0] == 2
    assert kzg_to_versioned_hash(commitment, 2)[1:] == versioned_hash[1:]


def test_blob_id_of_commitment():
    """Test that generated blobs can be identified by their commitment."""
    generator = BlobGenerator()
    data, commitment = generator.content(7)
    assert data == generate_blob_data(7)
    assert generator.blob_id_of(commitment) == 7
    assert generator.blob_id_of(b"\x00" * 48) is None


def test_cacheable_scheme_uses_disk_cache(tmp_path: Path):
    """Test that blobs of a cacheable scheme are computed once and then read from disk."""
    scheme = CountingScheme()
    blob = BlobGenerator(scheme, cache_directory=tmp_path).blob(5)
    assert scheme.computed == 1
    assert (tmp_path / "blob_counting_5.json").exists()

    cached = BlobGenerator(scheme, cache_directory=tmp_path).blob(5)
    assert scheme.computed == 1
    assert cached == blob


def test_stand_in_scheme_is_not_cached(tmp_path: Path):
    """Test that stand-in blobs never touch the disk."""
    BlobGenerator(cache_directory=tmp_path).blob(0)
    assert list(tmp_path.iterdir()) == []


class FakeResponse:
    """Response of a successful download of the trusted setup."""

    text = "4096\n65\n"

    def raise_for_status(self):
        """Accept the response."""
        pass


def test_trusted_setup_is_downloaded_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Test that the trusted setup is fetched on first use and then read from the cache."""
    requested_urls = []

    def fake_get(url, timeout):
        requested_urls.append(url)
        return FakeResponse()

    monkeypatch.setattr("requests.get", fake_get)
    cache_file = tmp_path / "setup" / "kzg_trusted_setup.txt"

    assert fetch_trusted_setup(cache_file, url="http://setup") == cache_file
    assert cache_file.read_text() == FakeResponse.text
    assert fetch_trusted_setup(cache_file, url="http://setup") == cache_file
    assert requested_urls == ["http://setup"]
    assert not cache_file.with_suffix(".partial").exists()


def test_trusted_setup_download_failure_propagates(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    """Test that a failed download leaves no trusted setup behind."""

    class FailingResponse(FakeResponse):
        def raise_for_status(self):
            raise requests.HTTPError("404 Not Found")

    monkeypatch.setattr("requests.get", lambda url, timeout: FailingResponse())
    cache_file = tmp_path / "kzg_trusted_setup.txt"
    with pytest.raises(requests.HTTPError):
        fetch_trusted_setup(cache_file)
    assert not cache_file.exists()
