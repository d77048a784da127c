"""Conversions from the loosely typed inputs accepted by the blob test types."""

from re import sub
from typing import List, SupportsBytes, TypeAlias

BytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int]
FixedSizeBytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int] | int
NumberConvertible: TypeAlias = str | bytes | SupportsBytes | int


def to_bytes(input_bytes: BytesConvertible) -> bytes:
    """Convert a hex string, a bytes-like object or a list of ints into bytes."""
    if input_bytes is None:
        raise ValueError("cannot convert `None` to bytes")

    if isinstance(input_bytes, (bytes, list, SupportsBytes)):
        return bytes(input_bytes)

    if isinstance(input_bytes, str):
        # Whitespace is allowed for readability in long literals
        input_bytes = sub(r"\s+", "", input_bytes)
        if input_bytes.startswith("0x"):
            input_bytes = input_bytes[2:]
        if len(input_bytes) % 2 == 1:
            input_bytes = "0" + input_bytes
        return bytes.fromhex(input_bytes)

    raise TypeError(f"invalid type for bytes: {type(input_bytes)}")


def to_fixed_size_bytes(
    input_bytes: FixedSizeBytesConvertible,
    size: int,
    *,
    left_padding: bool = False,
) -> bytes:
    """
    Convert the input into exactly `size` bytes.

    Integers are always encoded big-endian and padded. Other inputs must already have the
    right length unless `left_padding` is set.
    """
    if isinstance(input_bytes, int):
        return int.to_bytes(input_bytes, length=size, byteorder="big", signed=input_bytes < 0)
    input_bytes = to_bytes(input_bytes)
    if len(input_bytes) > size:
        raise ValueError(f"input is too large for fixed size bytes: {len(input_bytes)} > {size}")
    if len(input_bytes) < size:
        if left_padding:
            return bytes(input_bytes).rjust(size, b"\x00")
        raise ValueError(f"input is too small for fixed size bytes: {len(input_bytes)} < {size}")
    return input_bytes


def to_hex(input_bytes: BytesConvertible) -> str:
    """Convert the input into a 0x-prefixed hex string."""
    return "0x" + to_bytes(input_bytes).hex()


def to_number(input_number: NumberConvertible) -> int:
    """Convert an int, a decimal/hex string or big-endian bytes into an int."""
    if isinstance(input_number, int):
        return input_number
    if isinstance(input_number, str):
        return int(input_number, 0)
    if isinstance(input_number, (bytes, SupportsBytes)):
        return int.from_bytes(bytes(input_number), byteorder="big")
    raise TypeError(f"invalid type for number: {type(input_number)}")
