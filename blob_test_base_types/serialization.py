"""RLP serialization mixin for transactions, headers and withdrawals."""

from typing import Any, ClassVar, List

import ethereum_rlp as eth_rlp
from ethereum_types.numeric import Uint

from .base_types import Bytes


def to_serializable_element(v: Any) -> Any:
    """Return an element that can be passed to `eth_rlp.encode`."""
    if isinstance(v, int):
        return Uint(v)
    elif isinstance(v, bytes):
        return v
    elif isinstance(v, list):
        return [to_serializable_element(item) for item in v]
    elif isinstance(v, RLPSerializable):
        if v.signable:
            v.sign()
        return v.to_list(signing=False)
    elif v is None:
        return b""
    raise TypeError(f"Unable to serialize element {v} of type {type(v)}.")


class RLPSerializable:
    """Class that adds RLP serialization to another class."""

    signable: ClassVar[bool] = False
    rlp_fields: ClassVar[List[str]]
    rlp_signing_fields: ClassVar[List[str]]

    def get_rlp_fields(self) -> List[str]:
        """Return the ordered field names included in the RLP serialization."""
        return self.rlp_fields

    def get_rlp_signing_fields(self) -> List[str]:
        """Return the ordered field names included in the signing payload."""
        return self.rlp_signing_fields

    def get_rlp_prefix(self) -> bytes:
        """Return the bytes prepended to the serialized object."""
        return b""

    def get_rlp_signing_prefix(self) -> bytes:
        """Return the bytes prepended to the signing payload."""
        return b""

    def sign(self):
        """Sign the object before serialization."""
        raise NotImplementedError(f'Object "{self.__class__.__name__}" cannot be signed.')

    def to_list_from_fields(self, fields: List[str]) -> List[Any]:
        """Return the values of `fields` as an RLP serializable list."""
        values_list: List[Any] = []
        for field in fields:
            assert hasattr(self, field), (
                f'Unable to rlp serialize field "{field}" '
                f'in object type "{self.__class__.__name__}"'
            )
            try:
                values_list.append(to_serializable_element(getattr(self, field)))
            except TypeError as e:
                raise TypeError(
                    f'Unable to rlp serialize field "{field}" '
                    f'in object type "{self.__class__.__name__}"'
                ) from e
        return values_list

    def to_list(self, signing: bool = False) -> List[Any]:
        """Return the RLP serializable list of the object or of its signing payload."""
        if signing:
            if not self.signable:
                raise TypeError(f'Object "{self.__class__.__name__}" does not support signing')
            return self.to_list_from_fields(self.get_rlp_signing_fields())
        if self.signable:
            self.sign()
        return self.to_list_from_fields(self.get_rlp_fields())

    def rlp_signing_bytes(self) -> Bytes:
        """Return the serialized signing payload."""
        return Bytes(self.get_rlp_signing_prefix() + eth_rlp.encode(self.to_list(signing=True)))

    def rlp(self) -> Bytes:
        """Return the serialized object."""
        return Bytes(self.get_rlp_prefix() + eth_rlp.encode(self.to_list(signing=False)))


class SignableRLPSerializable(RLPSerializable):
    """RLP serializable object with a signature."""

    signable: ClassVar[bool] = True

    def sign(self):
        """Sign the object before serialization."""
        raise NotImplementedError(f'Object "{self.__class__.__name__}" needs to implement `sign`.')
