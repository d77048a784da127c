"""All post-merge forks the blob suite knows about."""

from typing import Dict, Mapping, Optional

from ..base_fork import BaseFork, BlobGasPriceCalculator, ExcessBlobGasCalculator
from .helpers import fake_exponential

BEACON_ROOTS_ADDRESS = 0x000F3DF6D732807EF1319FB7B8BB8522D0BEAC02

PRE_MERGE_FORK_VARIABLES = (
    "HIVE_FORK_HOMESTEAD",
    "HIVE_FORK_TANGERINE",
    "HIVE_FORK_SPURIOUS",
    "HIVE_FORK_BYZANTIUM",
    "HIVE_FORK_CONSTANTINOPLE",
    "HIVE_FORK_PETERSBURG",
    "HIVE_FORK_ISTANBUL",
    "HIVE_FORK_MUIR_GLACIER",
    "HIVE_FORK_BERLIN",
    "HIVE_FORK_LONDON",
    "HIVE_FORK_ARROW_GLACIER",
    "HIVE_FORK_GRAY_GLACIER",
)


# All forks must be listed here !!! in the order they were introduced !!!
class Paris(BaseFork, ignore=True):
    """Paris fork, the merge. Only used as the root of the post-merge forks."""

    @classmethod
    def header_withdrawals_required(cls) -> bool:
        """Withdrawals are not part of the header at Paris."""
        return False

    @classmethod
    def header_blob_fields_required(cls) -> bool:
        """Blob fields are not part of the header at Paris."""
        return False

    @classmethod
    def header_beacon_root_required(cls) -> bool:
        """The parent beacon block root is not part of the header at Paris."""
        return False

    @classmethod
    def header_requests_required(cls) -> bool:
        """The requests hash is not part of the header at Paris."""
        return False

    @classmethod
    def supports_blobs(cls) -> bool:
        """Blobs are not supported at Paris."""
        return False

    @classmethod
    def blob_gas_per_blob(cls) -> int:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Blob gas per blob is not supported in {cls.name()}")

    @classmethod
    def target_blobs_per_block(cls) -> int:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Target blobs per block is not supported in {cls.name()}")

    @classmethod
    def max_blobs_per_block(cls) -> int:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Max blobs per block is not supported in {cls.name()}")

    @classmethod
    def min_base_fee_per_blob_gas(cls) -> int:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Base fee per blob gas is not supported in {cls.name()}")

    @classmethod
    def blob_base_fee_update_fraction(cls) -> int:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(
            f"Blob base fee update fraction is not supported in {cls.name()}"
        )

    @classmethod
    def blob_gas_price_calculator(cls) -> BlobGasPriceCalculator:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Blob gas price calculator is not supported in {cls.name()}")

    @classmethod
    def excess_blob_gas_calculator(cls) -> ExcessBlobGasCalculator:
        """Blobs are not supported at Paris."""
        raise NotImplementedError(f"Excess blob gas calculator is not supported in {cls.name()}")

    @classmethod
    def engine_new_payload_version(cls) -> Optional[int]:
        """At Paris, `engine_newPayloadV1` is used."""
        return 1

    @classmethod
    def engine_forkchoice_updated_version(cls) -> Optional[int]:
        """At Paris, `engine_forkchoiceUpdatedV1` is used."""
        return 1

    @classmethod
    def engine_get_payload_version(cls) -> Optional[int]:
        """At Paris, `engine_getPayloadV1` is used."""
        return 1

    @classmethod
    def pre_allocation_blockchain(cls) -> Mapping:
        """Paris does not require pre-allocated accounts."""
        return {}

    @classmethod
    def hive_environment(cls, activation_timestamp: int = 0) -> Dict[str, int]:
        """All pre-merge forks at genesis and a terminal total difficulty of zero."""
        return {
            **{variable: 0 for variable in PRE_MERGE_FORK_VARIABLES},
            "HIVE_TERMINAL_TOTAL_DIFFICULTY": 0,
        }


class Shanghai(Paris):
    """Shanghai fork."""

    @classmethod
    def header_withdrawals_required(cls) -> bool:
        """Withdrawals are required starting from Shanghai."""
        return True

    @classmethod
    def engine_new_payload_version(cls) -> Optional[int]:
        """From Shanghai, new payload calls must use version 2."""
        return 2

    @classmethod
    def engine_forkchoice_updated_version(cls) -> Optional[int]:
        """From Shanghai, forkchoice updated calls must use version 2."""
        return 2

    @classmethod
    def engine_get_payload_version(cls) -> Optional[int]:
        """From Shanghai, get payload calls must use version 2."""
        return 2

    @classmethod
    def hive_environment(cls, activation_timestamp: int = 0) -> Dict[str, int]:
        """Shanghai activates by timestamp."""
        return super(Shanghai, cls).hive_environment() | {
            "HIVE_SHANGHAI_TIMESTAMP": activation_timestamp,
        }


class Cancun(Shanghai):
    """Cancun fork, which introduces blob transactions (EIP-4844)."""

    @classmethod
    def header_blob_fields_required(cls) -> bool:
        """Blob gas used and excess blob gas are required starting from Cancun."""
        return True

    @classmethod
    def header_beacon_root_required(cls) -> bool:
        """Parent beacon block root is required starting from Cancun."""
        return True

    @classmethod
    def supports_blobs(cls) -> bool:
        """At Cancun, blobs support is enabled."""
        return True

    @classmethod
    def blob_gas_per_blob(cls) -> int:
        """Every blob consumes 2**17 blob gas."""
        return 2**17

    @classmethod
    def target_blobs_per_block(cls) -> int:
        """Static target of 3 blobs per block."""
        return 3

    @classmethod
    def max_blobs_per_block(cls) -> int:
        """Static max of 6 blobs per block."""
        return 6

    @classmethod
    def min_base_fee_per_blob_gas(cls) -> int:
        """Return the minimum base fee per blob gas for Cancun."""
        return 1

    @classmethod
    def blob_base_fee_update_fraction(cls) -> int:
        """Return the blob base fee update fraction for Cancun."""
        return 3338477

    @classmethod
    def blob_gas_price_calculator(cls) -> BlobGasPriceCalculator:
        """Return a callable that calculates the blob gas price at Cancun."""
        min_base_fee_per_blob_gas = cls.min_base_fee_per_blob_gas()
        blob_base_fee_update_fraction = cls.blob_base_fee_update_fraction()

        def fn(*, excess_blob_gas: int) -> int:
            return fake_exponential(
                min_base_fee_per_blob_gas,
                excess_blob_gas,
                blob_base_fee_update_fraction,
            )

        return fn

    @classmethod
    def excess_blob_gas_calculator(cls) -> ExcessBlobGasCalculator:
        """Return a callable that calculates the excess blob gas for a block at Cancun."""
        target_blob_gas_per_block = cls.target_blobs_per_block() * cls.blob_gas_per_blob()

        def fn(*, parent_excess_blob_gas: int, parent_blob_gas_used: int) -> int:
            if parent_excess_blob_gas + parent_blob_gas_used < target_blob_gas_per_block:
                return 0
            return parent_excess_blob_gas + parent_blob_gas_used - target_blob_gas_per_block

        return fn

    @classmethod
    def engine_new_payload_version(cls) -> Optional[int]:
        """From Cancun, new payload calls must use version 3."""
        return 3

    @classmethod
    def engine_forkchoice_updated_version(cls) -> Optional[int]:
        """From Cancun, forkchoice updated calls must use version 3."""
        return 3

    @classmethod
    def engine_get_payload_version(cls) -> Optional[int]:
        """From Cancun, get payload calls must use version 3."""
        return 3

    @classmethod
    def pre_allocation_blockchain(cls) -> Mapping:
        """Cancun requires the beacon root contract of EIP-4788."""
        new_allocation = {
            BEACON_ROOTS_ADDRESS: {
                "nonce": 1,
                "code": "0x3373fffffffffffffffffffffffffffffffffffffffe14604d57602036146024575f5f"
                "fd5b5f35801560495762001fff810690815414603c575f5ffd5b62001fff01545f5260205ff35b5f"
                "5ffd5b62001fff42064281555f359062001fff015500",
            }
        }
        return new_allocation | super(Cancun, cls).pre_allocation_blockchain()  # type: ignore

    @classmethod
    def hive_environment(cls, activation_timestamp: int = 0) -> Dict[str, int]:
        """Cancun activates by timestamp and carries its blob schedule."""
        return super(Cancun, cls).hive_environment() | {
            "HIVE_CANCUN_TIMESTAMP": activation_timestamp,
            "HIVE_CANCUN_BLOB_TARGET": cls.target_blobs_per_block(),
            "HIVE_CANCUN_BLOB_MAX": cls.max_blobs_per_block(),
            "HIVE_CANCUN_BLOB_BASE_FEE_UPDATE_FRACTION": cls.blob_base_fee_update_fraction(),
        }


class Prague(Cancun):
    """Prague fork."""

    @classmethod
    def header_requests_required(cls) -> bool:
        """Prague requires the execution requests hash in the header."""
        return True

    @classmethod
    def blob_base_fee_update_fraction(cls) -> int:
        """Return the blob base fee update fraction for Prague."""
        return 5007716

    @classmethod
    def target_blobs_per_block(cls) -> int:
        """Target blob count of 6 for Prague."""
        return 6

    @classmethod
    def max_blobs_per_block(cls) -> int:
        """Max blob count of 9 for Prague."""
        return 9

    @classmethod
    def engine_new_payload_version(cls) -> Optional[int]:
        """From Prague, new payload calls must use version 4."""
        return 4

    @classmethod
    def engine_get_payload_version(cls) -> Optional[int]:
        """From Prague, get payload calls must use version 4."""
        return 4

    @classmethod
    def hive_environment(cls, activation_timestamp: int = 0) -> Dict[str, int]:
        """Prague activates by timestamp and carries its own blob schedule."""
        cancun_environment = Cancun.hive_environment()
        return cancun_environment | {
            "HIVE_PRAGUE_TIMESTAMP": activation_timestamp,
            "HIVE_PRAGUE_BLOB_TARGET": cls.target_blobs_per_block(),
            "HIVE_PRAGUE_BLOB_MAX": cls.max_blobs_per_block(),
            "HIVE_PRAGUE_BLOB_BASE_FEE_UPDATE_FRACTION": cls.blob_base_fee_update_fraction(),
        }
