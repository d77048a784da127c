"""
Test suite for the `blob_test_base_types` primitives.
"""

from typing import Any

import pytest

from ..base_types import Address, Bytes, Hash, HexNumber, KZGCommitment, Number, Wei
from ..json import to_json
from ..pydantic import CamelModel


@pytest.mark.parametrize(
    "a, b, equal",
    [
        (Address(0), Address(0), True),
        (Address(0), Address(1), False),
        (Address(1), "0x01", True),
        (Address(1), 1, True),
        (Address(1), 2, False),
        (Address(1), b"\x01", True),
        (Hash(1), "0x01", True),
        (Hash(1), 1, True),
        (Hash(1), b"\x02", False),
        (1, Hash(1), True),
        (Hash(0), None, False),
    ],
)
def test_comparisons(a: Any, b: Any, equal: bool):
    """Test the comparison of fixed size bytes against loosely typed values."""
    if equal:
        assert a == b
        assert not a != b
    else:
        assert a != b
        assert not a == b


@pytest.mark.parametrize(
    "s, expected",
    [
        ("0", 0),
        ("0x10", 16),
        ("1 wei", 1),
        ("30 gwei", 30 * 10**9),
        ("1 ether", 10**18),
        (1_000, 1_000),
    ],
)
def test_wei_parsing(s: Any, expected: int):
    """Test parsing of wei amounts written with units."""
    assert Wei(s) == expected


def test_wei_invalid_unit():
    """Test that an unknown unit is rejected."""
    with pytest.raises(ValueError):
        Wei("1 lovelace-ish")


def test_number_rendering():
    """Test decimal and hex rendering of numbers."""
    assert str(Number(255)) == "255"
    assert str(HexNumber(255)) == "0xff"
    assert HexNumber("0xff") == 255
    assert Number(b"\x01\x00") == 256


def test_fixed_size_bytes_length():
    """Test that fixed size bytes refuse inputs of the wrong size."""
    assert len(KZGCommitment(b"\x00" * 48)) == 48
    with pytest.raises(ValueError):
        KZGCommitment(b"\x00" * 47)
    with pytest.raises(ValueError):
        Hash(b"\x00" * 33)
    assert Hash(b"\x01", left_padding=True) == 1


def test_bytes_digests():
    """Test the digest helpers against well known values."""
    assert Bytes(b"").keccak256() == Hash(
        "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )
    assert Bytes(b"").sha256() == Hash(
        "0xe3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


class SampleModel(CamelModel):
    """Model used to check camel case serialization."""

    blob_gas_used: HexNumber
    parent_hash: Hash
    extra: Bytes | None = None


def test_camel_model_serialization():
    """Test that models serialize with camel case keys and hex values."""
    model = SampleModel(blob_gas_used=0x20000, parent_hash=Hash(1))
    assert to_json(model) == {
        "blobGasUsed": "0x20000",
        "parentHash": "0x" + "00" * 31 + "01",
    }
    parsed = SampleModel.model_validate({"blobGasUsed": "0x1", "parentHash": "0x" + "00" * 32})
    assert parsed.blob_gas_used == 1
    assert parsed.copy(blob_gas_used=2).blob_gas_used == 2


def test_to_json_keeps_none_and_lists():
    """Test that `None` survives JSON conversion and lists are converted item by item."""
    assert to_json(None) is None
    assert to_json([Hash(1)]) == ["0x" + "00" * 31 + "01"]
    assert to_json([]) == []
