"""Abstract base class for the forks the blob suite can run against."""

from abc import ABC, ABCMeta, abstractmethod
from typing import ClassVar, Dict, Mapping, Optional, Protocol


class BlobGasPriceCalculator(Protocol):
    """A protocol to calculate the blob gas price given the excess blob gas."""

    def __call__(self, *, excess_blob_gas: int) -> int:
        """Return the blob gas price."""
        pass


class ExcessBlobGasCalculator(Protocol):
    """A protocol to calculate the excess blob gas of a block given its parent."""

    def __call__(self, *, parent_excess_blob_gas: int, parent_blob_gas_used: int) -> int:
        """Return the excess blob gas of the child block."""
        pass


class BaseForkMeta(ABCMeta):
    """Metaclass for BaseFork."""

    @abstractmethod
    def name(cls) -> str:
        """Return the name of the fork (e.g., Cancun), must be implemented by subclasses."""
        pass

    def __repr__(cls) -> str:
        """Print the name of the fork, instead of the class."""
        return cls.name()

    def __gt__(cls, other: "BaseForkMeta") -> bool:
        """Compare if a fork is newer than some other fork (cls > other)."""
        return cls is not other and issubclass(cls, other)

    def __ge__(cls, other: "BaseForkMeta") -> bool:
        """Compare if a fork is newer than or equal to some other fork (cls >= other)."""
        return cls is other or issubclass(cls, other)

    def __lt__(cls, other: "BaseForkMeta") -> bool:
        """Compare if a fork is older than some other fork (cls < other)."""
        return cls is not other and issubclass(other, cls)

    def __le__(cls, other: "BaseForkMeta") -> bool:
        """Compare if a fork is older than or equal to some other fork (cls <= other)."""
        return cls is other or issubclass(other, cls)


class BaseFork(ABC, metaclass=BaseForkMeta):
    """
    An abstract class representing a post-merge fork.

    Only the properties the blob suite depends on are modelled: the header fields a
    payload must carry, the blob-gas market parameters, the Engine API method versions
    and the hive environment needed to start a client at the fork.
    """

    _ignore: ClassVar[bool] = False

    def __init_subclass__(cls, *, ignore: bool = False) -> None:
        """Mark forks that are only used as building blocks."""
        cls._ignore = ignore

    # Header information abstract methods
    @classmethod
    @abstractmethod
    def header_withdrawals_required(cls) -> bool:
        """Return true if the header must contain the withdrawals root."""
        pass

    @classmethod
    @abstractmethod
    def header_blob_fields_required(cls) -> bool:
        """Return true if the header must contain blob gas used and excess blob gas."""
        pass

    @classmethod
    @abstractmethod
    def header_beacon_root_required(cls) -> bool:
        """Return true if the header must contain the parent beacon block root."""
        pass

    @classmethod
    @abstractmethod
    def header_requests_required(cls) -> bool:
        """Return true if the header must contain the execution requests hash."""
        pass

    # Blob gas market abstract methods
    @classmethod
    @abstractmethod
    def supports_blobs(cls) -> bool:
        """Return true if blob transactions can be included at the fork."""
        pass

    @classmethod
    @abstractmethod
    def blob_gas_per_blob(cls) -> int:
        """Return the amount of blob gas consumed by each blob."""
        pass

    @classmethod
    @abstractmethod
    def target_blobs_per_block(cls) -> int:
        """Return the number of blobs per block that keeps the blob gas price stable."""
        pass

    @classmethod
    @abstractmethod
    def max_blobs_per_block(cls) -> int:
        """Return the maximum number of blobs a block can include."""
        pass

    @classmethod
    @abstractmethod
    def min_base_fee_per_blob_gas(cls) -> int:
        """Return the floor of the blob gas price."""
        pass

    @classmethod
    @abstractmethod
    def blob_base_fee_update_fraction(cls) -> int:
        """Return the denominator of the blob gas price exponent."""
        pass

    @classmethod
    @abstractmethod
    def blob_gas_price_calculator(cls) -> BlobGasPriceCalculator:
        """Return a callable that calculates the blob gas price."""
        pass

    @classmethod
    @abstractmethod
    def excess_blob_gas_calculator(cls) -> ExcessBlobGasCalculator:
        """Return a callable that calculates the excess blob gas of the next block."""
        pass

    # Engine API information abstract methods
    @classmethod
    @abstractmethod
    def engine_new_payload_version(cls) -> Optional[int]:
        """Return the version of `engine_newPayload` used at the fork."""
        pass

    @classmethod
    @abstractmethod
    def engine_forkchoice_updated_version(cls) -> Optional[int]:
        """Return the version of `engine_forkchoiceUpdated` used at the fork."""
        pass

    @classmethod
    @abstractmethod
    def engine_get_payload_version(cls) -> Optional[int]:
        """Return the version of `engine_getPayload` used at the fork."""
        pass

    @classmethod
    @abstractmethod
    def pre_allocation_blockchain(cls) -> Mapping:
        """Return the accounts a client genesis must contain for the fork to work."""
        pass

    # Hive information abstract methods
    @classmethod
    @abstractmethod
    def hive_environment(cls, activation_timestamp: int = 0) -> Dict[str, int]:
        """
        Return the hive environment variables that configure a client to activate this
        fork at `activation_timestamp`, with all previous forks active at genesis.
        """
        pass

    # Meta information about the fork
    @classmethod
    def name(cls) -> str:
        """Return the name of the fork."""
        return cls.__name__

    @classmethod
    def ignore(cls) -> bool:
        """Return whether the fork should be ignored when listing forks."""
        return cls._ignore

    @classmethod
    def parent(cls) -> Optional["BaseFork"]:
        """Return the parent fork."""
        base_class = cls.__bases__[0]
        assert issubclass(base_class, BaseFork)
        if base_class == BaseFork:
            return None
        return base_class


# Fork Type
Fork = type[BaseFork]
