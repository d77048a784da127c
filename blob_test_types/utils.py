"""Utility functions for the blob test types."""

from blob_test_base_types import Bytes, Hash


def keccak256(data: bytes) -> Hash:
    """Calculate keccak256 hash of the given data."""
    return Bytes(data).keccak256()
