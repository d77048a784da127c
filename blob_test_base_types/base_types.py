"""Primitive types shared by every blob test package."""

from hashlib import sha256
from typing import Any, ClassVar, SupportsBytes, Type, TypeVar

from Crypto.Hash import keccak
from pydantic import GetCoreSchemaHandler
from pydantic_core.core_schema import (
    PlainValidatorFunctionSchema,
    no_info_plain_validator_function,
    to_string_ser_schema,
)

from .conversions import (
    BytesConvertible,
    FixedSizeBytesConvertible,
    NumberConvertible,
    to_bytes,
    to_fixed_size_bytes,
    to_number,
)

N = TypeVar("N", bound="Number")
T = TypeVar("T", bound="FixedSizeBytes")


class ToStringSchema:
    """Pydantic schema that validates through the class constructor and serializes to str."""

    @staticmethod
    def __get_pydantic_core_schema__(
        source_type: Any, handler: GetCoreSchemaHandler
    ) -> PlainValidatorFunctionSchema:
        """Build the schema from the class constructor."""
        return no_info_plain_validator_function(
            source_type,
            serialization=to_string_ser_schema(),
        )


class Number(int, ToStringSchema):
    """Integer that accepts hex strings and bytes as input."""

    def __new__(cls, input_number: NumberConvertible | N):
        """Create a new Number object."""
        return super(Number, cls).__new__(cls, to_number(input_number))

    def __str__(self) -> str:
        """Return the decimal representation."""
        return str(int(self))

    def hex(self) -> str:
        """Return the hexadecimal representation."""
        return hex(self)

    @classmethod
    def or_none(cls: Type[N], input_number: N | NumberConvertible | None) -> N | None:
        """Convert the input while letting `None` through."""
        if input_number is None:
            return None
        return cls(input_number)


class Wei(Number):
    """Amount of wei that can also be written as `"<value> <unit>"`, e.g. `"30 gwei"`."""

    UNITS: ClassVar[dict[str, int]] = {
        "wei": 1,
        "kwei": 10**3,
        "mwei": 10**6,
        "gwei": 10**9,
        "szabo": 10**12,
        "finney": 10**15,
        "ether": 10**18,
    }

    def __new__(cls, input_number: NumberConvertible | N):
        """Create a new Wei object."""
        if isinstance(input_number, str) and " " in input_number.strip():
            value_str, unit = input_number.split()
            if unit.lower() not in cls.UNITS:
                raise ValueError(f"Invalid unit {unit}")
            return super(Number, cls).__new__(cls, int(value_str) * cls.UNITS[unit.lower()])
        return super(Number, cls).__new__(cls, to_number(input_number))


class HexNumber(Number):
    """Number that renders as hex, the form used by the JSON-RPC quantities."""

    def __str__(self) -> str:
        """Return the hexadecimal representation."""
        return self.hex()


class ZeroPaddedHexNumber(HexNumber):
    """Hex number padded to an even number of digits."""

    def hex(self) -> str:
        """Return the even-length hexadecimal representation."""
        if self == 0:
            return "0x00"
        hex_str = hex(self)[2:]
        if len(hex_str) % 2 == 1:
            return "0x0" + hex_str
        return "0x" + hex_str


class Bytes(bytes, ToStringSchema):
    """Variable length bytes rendered as 0x-prefixed hex."""

    def __new__(cls, input_bytes: BytesConvertible = b""):
        """Create a new Bytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(Bytes, cls).__new__(cls, to_bytes(input_bytes))

    def __hash__(self) -> int:
        """Return the hash of the underlying bytes."""
        return super(Bytes, self).__hash__()

    def __str__(self) -> str:
        """Return the hexadecimal representation."""
        return self.hex()

    def hex(self, *args, **kwargs) -> str:
        """Return the 0x-prefixed hexadecimal representation."""
        return "0x" + super().hex(*args, **kwargs)

    @classmethod
    def or_none(cls, input_bytes: "Bytes | BytesConvertible | None") -> "Bytes | None":
        """Convert the input while letting `None` through."""
        if input_bytes is None:
            return None
        return cls(input_bytes)

    def keccak256(self) -> "Hash":
        """Return the keccak256 digest."""
        k = keccak.new(digest_bits=256)
        return Hash(k.update(bytes(self)).digest())

    def sha256(self) -> "Hash":
        """Return the sha256 digest."""
        return Hash(sha256(self).digest())


class FixedSizeBytes(Bytes):
    """Bytes of a length fixed by the subclass, e.g. `FixedSizeBytes[32]`."""

    byte_length: ClassVar[int]
    _sized_: ClassVar[Type["FixedSizeBytes"]]

    def __class_getitem__(cls, length: int) -> Type["FixedSizeBytes"]:
        """Create a new class of the given length."""

        class Sized(cls):  # type: ignore
            byte_length = length

        Sized._sized_ = Sized
        return Sized

    def __new__(
        cls,
        input_bytes: FixedSizeBytesConvertible | T,
        *,
        left_padding: bool = False,
    ):
        """Create a new FixedSizeBytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(FixedSizeBytes, cls).__new__(
            cls,
            to_fixed_size_bytes(input_bytes, cls.byte_length, left_padding=left_padding),
        )

    def __hash__(self) -> int:
        """Return the hash of the underlying bytes."""
        return super(FixedSizeBytes, self).__hash__()

    @classmethod
    def or_none(cls: Type[T], input_bytes: T | FixedSizeBytesConvertible | None) -> T | None:
        """Convert the input while letting `None` through."""
        if input_bytes is None:
            return None
        return cls(input_bytes)

    def __eq__(self, other: object) -> bool:
        """Compare against other bytes, hex strings or ints of the same size."""
        if other is None:
            return False
        if not isinstance(other, FixedSizeBytes):
            if not isinstance(other, (str, int, bytes, SupportsBytes)):
                return NotImplemented
            other = self._sized_(other, left_padding=True)
        return super().__eq__(other)

    def __ne__(self, other: object) -> bool:
        """Negate `__eq__`."""
        return not self.__eq__(other)


class Address(FixedSizeBytes[20]):  # type: ignore
    """Account address."""

    pass


class Hash(FixedSizeBytes[32]):  # type: ignore
    """32-byte hash."""

    pass


class Bloom(FixedSizeBytes[256]):  # type: ignore
    """Logs bloom filter."""

    pass


class HeaderNonce(FixedSizeBytes[8]):  # type: ignore
    """Proof-of-work nonce of a block header, always zero after the merge."""

    pass


class KZGCommitment(FixedSizeBytes[48]):  # type: ignore
    """Commitment to the contents of one blob."""

    pass


class KZGProof(FixedSizeBytes[48]):  # type: ignore
    """Proof that a commitment opens to the contents of one blob."""

    pass
