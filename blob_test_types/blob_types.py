"""
Deterministic synthetic blobs addressed by a small integer identifier.

The content of a blob is a pure function of its `BlobID`: a local RNG seeded with the ID
draws one canonical field element per slot. The commitment and proof are delegated to a
`CommitmentScheme`. `CKZGCommitmentScheme` produces the real KZG commitments that clients
verify, and `StandInCommitmentScheme` produces deterministic stand-ins for tests that never
reach a client.
"""

import json
import random
from abc import ABC, abstractmethod
from functools import cache
from hashlib import sha256, sha384
from pathlib import Path
from typing import ClassVar, Dict, List, Tuple, TypeAlias

import ckzg  # type: ignore
import platformdirs
import requests
from filelock import FileLock

from blob_test_base_types import Bytes, CamelModel, Hash, KZGCommitment, KZGProof
from pytest_plugins.logging import get_logger

BlobID: TypeAlias = int

FIELD_ELEMENTS_PER_BLOB = 4096
BYTES_PER_FIELD_ELEMENT = 32
BYTES_PER_BLOB = FIELD_ELEMENTS_PER_BLOB * BYTES_PER_FIELD_ELEMENT
BLS_MODULUS = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001
VERSIONED_HASH_VERSION_KZG = 0x01

CACHED_BLOBS_DIRECTORY: Path = (
    Path(platformdirs.user_cache_dir("engine-blob-tests")) / "cached_blobs"
)
CACHED_TRUSTED_SETUP: Path = (
    Path(platformdirs.user_cache_dir("engine-blob-tests")) / "kzg_trusted_setup.txt"
)
TRUSTED_SETUP_URL = (
    "https://raw.githubusercontent.com/ethereum/c-kzg-4844/main/src/trusted_setup.txt"
)

logger = get_logger(__name__)


def fetch_trusted_setup(
    cache_file: Path = CACHED_TRUSTED_SETUP,
    url: str = TRUSTED_SETUP_URL,
    timeout: float = 60,
) -> Path:
    """
    Return the path of the mainnet KZG trusted setup, downloading it on first use.

    The file lock lets xdist workers share one download.
    """
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(cache_file.with_suffix(".lock")):
        if not cache_file.exists():
            logger.info(f"Downloading the KZG trusted setup from {url}")
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            partial_file = cache_file.with_suffix(".partial")
            partial_file.write_text(response.text)
            partial_file.rename(cache_file)
    return cache_file


def kzg_to_versioned_hash(
    commitment: bytes, version: int = VERSIONED_HASH_VERSION_KZG
) -> Hash:
    """Return the sha256 digest of the commitment with its first byte replaced by the version."""
    return Hash(bytes([version]) + sha256(commitment).digest()[1:])


@cache
def generate_blob_data(blob_id: BlobID) -> Bytes:
    """Return the content of the blob with the given ID."""
    assert blob_id >= 0, f"invalid blob id {blob_id}"
    rng = random.Random(blob_id)
    field_elements = (rng.randrange(BLS_MODULUS) for _ in range(FIELD_ELEMENTS_PER_BLOB))
    return Bytes(b"".join(fe.to_bytes(BYTES_PER_FIELD_ELEMENT, "big") for fe in field_elements))


class CommitmentScheme(ABC):
    """Computes the commitment and proof attached to a blob."""

    name: ClassVar[str]
    cacheable: ClassVar[bool] = False

    @abstractmethod
    def commitment(self, data: Bytes) -> KZGCommitment:
        """Return the commitment to the blob content."""
        pass

    @abstractmethod
    def proof(self, data: Bytes, commitment: KZGCommitment) -> KZGProof:
        """Return the proof that the commitment opens to the blob content."""
        pass


class StandInCommitmentScheme(CommitmentScheme):
    """
    Deterministic 48-byte stand-ins derived from the blob content.

    Distinct content yields distinct commitments, which is all the versioned hash
    bookkeeping needs. Clients that verify KZG proofs will reject these.
    """

    name = "stand-in"

    def commitment(self, data: Bytes) -> KZGCommitment:
        """Return the sha384 digest of the content."""
        return KZGCommitment(sha384(data).digest())

    def proof(self, data: Bytes, commitment: KZGCommitment) -> KZGProof:
        """Return the sha384 digest of the commitment."""
        return KZGProof(sha384(b"proof" + commitment).digest())


class CKZGCommitmentScheme(CommitmentScheme):
    """Real KZG commitments computed with `ckzg`."""

    name = "ckzg"
    cacheable = True

    def __init__(self, trusted_setup_path: Path | None = None, precompute: int = 0):
        """
        Load the trusted setup once for every blob computed with this scheme.

        Without a path, the mainnet trusted setup is fetched into the user cache.
        """
        if trusted_setup_path is None:
            trusted_setup_path = fetch_trusted_setup()
        self.trusted_setup_path = trusted_setup_path
        self.trusted_setup = ckzg.load_trusted_setup(str(trusted_setup_path), precompute)

    def commitment(self, data: Bytes) -> KZGCommitment:
        """Return the KZG commitment to the blob."""
        return KZGCommitment(ckzg.blob_to_kzg_commitment(data, self.trusted_setup))

    def proof(self, data: Bytes, commitment: KZGCommitment) -> KZGProof:
        """Return the blob KZG proof of the commitment."""
        return KZGProof(ckzg.compute_blob_kzg_proof(data, commitment, self.trusted_setup))


class Blob(CamelModel):
    """A synthetic blob with its commitment and proof."""

    blob_id: BlobID
    data: Bytes
    commitment: KZGCommitment
    proof: KZGProof

    def versioned_hash(self, version: int = VERSIONED_HASH_VERSION_KZG) -> Hash:
        """Return the versioned hash of the blob's commitment."""
        return kzg_to_versioned_hash(self.commitment, version)


class BlobGenerator:
    """
    Generates blobs by ID and remembers them so that commitments found in a produced
    payload can be mapped back to the ID that generated them.
    """

    scheme: CommitmentScheme
    cache_directory: Path | None
    _blobs: Dict[BlobID, Blob]
    _ids_by_commitment: Dict[KZGCommitment, BlobID]

    def __init__(
        self,
        scheme: CommitmentScheme | None = None,
        *,
        cache_directory: Path | None = CACHED_BLOBS_DIRECTORY,
    ):
        """Initialize the generator, using stand-in commitments by default."""
        self.scheme = scheme if scheme is not None else StandInCommitmentScheme()
        self.cache_directory = cache_directory if self.scheme.cacheable else None
        self._blobs = {}
        self._ids_by_commitment = {}

    def _compute(self, blob_id: BlobID) -> Blob:
        data = generate_blob_data(blob_id)
        commitment = self.scheme.commitment(data)
        return Blob(
            blob_id=blob_id,
            data=data,
            commitment=commitment,
            proof=self.scheme.proof(data, commitment),
        )

    def _load_or_compute(self, blob_id: BlobID) -> Blob:
        if self.cache_directory is None:
            return self._compute(blob_id)
        self.cache_directory.mkdir(parents=True, exist_ok=True)
        blob_file = self.cache_directory / f"blob_{self.scheme.name}_{blob_id}.json"
        with FileLock(blob_file.with_suffix(".lock")):
            if blob_file.exists():
                with open(blob_file, "r") as f:
                    return Blob.model_validate(json.load(f))
            blob = self._compute(blob_id)
            with open(blob_file, "w") as f:
                json.dump(blob.model_dump(mode="json", by_alias=True), f)
            logger.debug(f"Cached blob {blob_id} at {blob_file}")
            return blob

    def blob(self, blob_id: BlobID) -> Blob:
        """Return the blob with the given ID."""
        if blob_id not in self._blobs:
            blob = self._load_or_compute(blob_id)
            self._blobs[blob_id] = blob
            self._ids_by_commitment[blob.commitment] = blob_id
        return self._blobs[blob_id]

    def blobs(self, blob_ids: List[BlobID]) -> List[Blob]:
        """Return the blobs with the given IDs, in order."""
        return [self.blob(blob_id) for blob_id in blob_ids]

    def content(self, blob_id: BlobID) -> Tuple[Bytes, KZGCommitment]:
        """Return the content of the blob and its commitment."""
        blob = self.blob(blob_id)
        return blob.data, blob.commitment

    def versioned_hash(
        self, blob_id: BlobID, version: int = VERSIONED_HASH_VERSION_KZG
    ) -> Hash:
        """Return the versioned hash of the blob with the given ID."""
        return self.blob(blob_id).versioned_hash(version)

    def blob_id_of(self, commitment: bytes) -> BlobID | None:
        """Return the ID of a previously generated blob by its commitment."""
        return self._ids_by_commitment.get(KZGCommitment(commitment))
