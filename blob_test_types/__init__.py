"""Blob, transaction and block types used by the blob tests."""

from .account_types import EOA
from .blob_types import (
    BLS_MODULUS,
    BYTES_PER_BLOB,
    BYTES_PER_FIELD_ELEMENT,
    FIELD_ELEMENTS_PER_BLOB,
    VERSIONED_HASH_VERSION_KZG,
    Blob,
    BlobGenerator,
    BlobID,
    CKZGCommitmentScheme,
    CommitmentScheme,
    StandInCommitmentScheme,
    generate_blob_data,
    kzg_to_versioned_hash,
)
from .block_types import BlockHeader, Withdrawal, requests_hash, transactions_root
from .transaction_types import (
    BLOB_TRANSACTION_TYPE,
    AccessList,
    BlobTransaction,
    NetworkWrappedTransaction,
)
from .utils import keccak256
from .versioned_hashes import CorruptionMode, VersionedHashes

__all__ = (
    "BLOB_TRANSACTION_TYPE",
    "BLS_MODULUS",
    "BYTES_PER_BLOB",
    "BYTES_PER_FIELD_ELEMENT",
    "FIELD_ELEMENTS_PER_BLOB",
    "VERSIONED_HASH_VERSION_KZG",
    "AccessList",
    "Blob",
    "BlobGenerator",
    "BlobID",
    "BlobTransaction",
    "BlockHeader",
    "CKZGCommitmentScheme",
    "CommitmentScheme",
    "CorruptionMode",
    "EOA",
    "NetworkWrappedTransaction",
    "StandInCommitmentScheme",
    "VersionedHashes",
    "Withdrawal",
    "generate_blob_data",
    "keccak256",
    "kzg_to_versioned_hash",
    "requests_hash",
    "transactions_root",
)
