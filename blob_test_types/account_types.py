"""Account-related types for the blob tests."""

from typing import Self

from coincurve.keys import PrivateKey

from blob_test_base_types import Address, Hash, Number
from blob_test_base_types.conversions import FixedSizeBytesConvertible, NumberConvertible

from .utils import keccak256


class EOA(Address):
    """
    An Externally Owned Account (EOA) is an account controlled by a private key.

    The EOA is defined by its address and (optionally) by its corresponding private key.
    It keeps track of the next nonce to use when sending transactions from it.
    """

    key: Hash | None
    nonce: Number

    def __new__(
        cls,
        address: "FixedSizeBytesConvertible | Address | EOA | None" = None,
        *,
        key: FixedSizeBytesConvertible | None = None,
        nonce: NumberConvertible = 0,
    ):
        """Init the EOA."""
        if address is None:
            if key is None:
                raise ValueError("impossible to initialize EOA without address")
            private_key = PrivateKey(Hash(key))
            public_key = private_key.public_key
            address = Address(keccak256(public_key.format(compressed=False)[1:])[32 - 20 :])
        elif isinstance(address, EOA):
            return address
        instance = super(EOA, cls).__new__(cls, address)
        instance.key = Hash(key) if key is not None else None
        instance.nonce = Number(nonce)
        return instance

    def get_nonce(self) -> Number:
        """Return current nonce of the EOA and increments it by one."""
        nonce = self.nonce
        self.nonce = Number(nonce + 1)
        return nonce

    def previous_nonce(self) -> Number:
        """Return the nonce of the last transaction sent from the EOA, without advancing."""
        if self.nonce == 0:
            raise ValueError(f"no transaction has been sent from {self}")
        return Number(self.nonce - 1)

    def copy(self) -> Self:
        """Return copy of the EOA."""
        return self.__class__(Address(self), key=self.key, nonce=self.nonce)
