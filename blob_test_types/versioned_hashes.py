"""
Versioned hash lists described by the blob IDs they reference.

A `VersionedHashes` is not itself a valid list of versioned hashes: it describes how to
build one, and may describe an invalid one on purpose (missing, extra, repeated or
reordered entries, an unrelated blob, a wrong version byte, or no list at all).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from blob_test_base_types import Hash

from .blob_types import VERSIONED_HASH_VERSION_KZG, BlobGenerator, BlobID


class CorruptionMode(Enum):
    """Ways of corrupting the versioned hash list of a valid payload."""

    MISSING = "missing"
    EXTRA = "extra"
    OUT_OF_ORDER = "out-of-order"
    REPEATED = "repeated"
    INCORRECT_HASH = "incorrect-hash"
    INCORRECT_VERSION = "incorrect-version"
    NIL = "nil"
    EMPTY = "empty"

    def __str__(self) -> str:
        """Return the mode name."""
        return self.value


@dataclass(frozen=True)
class VersionedHashes:
    """
    Blob IDs, and optionally one version byte per position, that render to a list of
    versioned hashes.

    `blobs=None` renders to `None` (the field is absent from the call) while `blobs=[]`
    renders to an empty list. Positions without a version override use the KZG version.
    """

    blobs: Sequence[BlobID] | None
    hash_versions: Sequence[int] | None = None

    def version_at(self, index: int) -> int:
        """Return the version byte used at the given position."""
        if self.hash_versions is not None and index < len(self.hash_versions):
            return self.hash_versions[index]
        return VERSIONED_HASH_VERSION_KZG

    def render(self, generator: BlobGenerator) -> List[Hash] | None:
        """Return the versioned hashes in the order and multiplicity requested."""
        if self.blobs is None:
            return None
        return [
            generator.versioned_hash(blob_id, self.version_at(i))
            for i, blob_id in enumerate(self.blobs)
        ]

    @property
    def description(self) -> str:
        """Return a short description of the list."""
        if self.blobs is None:
            return "nil"
        if self.hash_versions is None:
            return f"blobs={list(self.blobs)}"
        return f"blobs={list(self.blobs)} versions={list(self.hash_versions)}"

    def __str__(self) -> str:
        """Return the description."""
        return self.description

    @classmethod
    def from_corruption(
        cls,
        mode: CorruptionMode,
        included: Sequence[BlobID],
        unrelated: BlobID,
    ) -> "VersionedHashes":
        """
        Return the corruption of the canonical list of the `included` blobs.

        `unrelated` is a blob ID not included in the payload. A `ValueError` is raised when
        the mode would reproduce the canonical list for the given input.
        """
        included = list(included)
        if unrelated in included:
            raise ValueError(f"blob {unrelated} is included in the payload")
        if mode != CorruptionMode.EXTRA and mode != CorruptionMode.NIL and not included:
            raise ValueError(f"{mode} corruption requires at least one included blob")

        match mode:
            case CorruptionMode.MISSING:
                return cls(blobs=included[:-1])
            case CorruptionMode.EXTRA:
                return cls(blobs=included + [unrelated])
            case CorruptionMode.OUT_OF_ORDER:
                if len(included) < 2:
                    raise ValueError("out-of-order corruption requires at least two blobs")
                return cls(blobs=included[::-1])
            case CorruptionMode.REPEATED:
                return cls(blobs=included + [included[-1]])
            case CorruptionMode.INCORRECT_HASH:
                return cls(blobs=included[:-1] + [unrelated])
            case CorruptionMode.INCORRECT_VERSION:
                versions = [VERSIONED_HASH_VERSION_KZG] * len(included)
                versions[-1] = VERSIONED_HASH_VERSION_KZG + 1
                return cls(blobs=included, hash_versions=versions)
            case CorruptionMode.NIL:
                return cls(blobs=None)
            case CorruptionMode.EMPTY:
                return cls(blobs=[])
        raise ValueError(f"unknown corruption mode {mode}")
