"""
Common definitions and types.
"""

from .base_types import (
    Address,
    Bloom,
    Bytes,
    FixedSizeBytes,
    Hash,
    HeaderNonce,
    HexNumber,
    KZGCommitment,
    KZGProof,
    Number,
    Wei,
    ZeroPaddedHexNumber,
)
from .constants import (
    BlobTxDestination,
    EmptyBloom,
    EmptyHash,
    EmptyOmmersRoot,
    EmptyTrieRoot,
    TestPrivateKey,
    ZeroAddress,
)
from .conversions import to_bytes, to_hex
from .json import to_json
from .pydantic import BlobTestBaseModel, BlobTestRootModel, CamelModel, CopyValidateModel
from .serialization import RLPSerializable, SignableRLPSerializable

__all__ = (
    "Address",
    "BlobTestBaseModel",
    "BlobTestRootModel",
    "BlobTxDestination",
    "Bloom",
    "Bytes",
    "CamelModel",
    "CopyValidateModel",
    "EmptyBloom",
    "EmptyHash",
    "EmptyOmmersRoot",
    "EmptyTrieRoot",
    "FixedSizeBytes",
    "Hash",
    "HeaderNonce",
    "HexNumber",
    "KZGCommitment",
    "KZGProof",
    "Number",
    "RLPSerializable",
    "SignableRLPSerializable",
    "TestPrivateKey",
    "Wei",
    "ZeroAddress",
    "ZeroPaddedHexNumber",
    "to_bytes",
    "to_hex",
    "to_json",
)
