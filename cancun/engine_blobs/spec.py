"""Defines the constants and helpers of the Engine API blob scenarios."""

from dataclasses import dataclass

from blob_test_forks import Fork, ceiling_division


@dataclass(frozen=True)
class Spec:
    """Parameters of the scenarios that do not depend on the fork."""

    # Blob transactions sent by the versioned hash scenarios.
    VERSIONED_HASH_TRANSACTION_COUNT = 2


@dataclass(frozen=True)
class SpecHelpers:
    """Define helper functions derived from the blob gas parameters of a fork."""

    @classmethod
    def get_min_excess_blob_gas_for_blob_gas_price(
        cls,
        *,
        fork: Fork,
        blob_gas_price: int,
    ) -> int:
        """
        Get the minimum required excess blob gas value to get a given blob gas cost in a
        block.
        """
        current_excess_blob_gas = 0
        current_blob_gas_price = 1
        get_blob_gas_price = fork.blob_gas_price_calculator()
        gas_per_blob = fork.blob_gas_per_blob()
        while current_blob_gas_price < blob_gas_price:
            current_excess_blob_gas += gas_per_blob
            current_blob_gas_price = get_blob_gas_price(excess_blob_gas=current_excess_blob_gas)
        return current_excess_blob_gas

    @classmethod
    def get_min_excess_blobs_for_blob_gas_price(
        cls,
        *,
        fork: Fork,
        blob_gas_price: int,
    ) -> int:
        """Get the minimum required excess blobs to get a given blob gas cost in a block."""
        return (
            cls.get_min_excess_blob_gas_for_blob_gas_price(
                fork=fork, blob_gas_price=blob_gas_price
            )
            // fork.blob_gas_per_blob()
        )

    @classmethod
    def get_full_payloads_to_blob_gas_price(cls, *, fork: Fork, blob_gas_price: int) -> int:
        """
        Get the number of full payloads that, starting from zero excess blob gas, raise
        the blob gas price of the next payload to `blob_gas_price`.
        """
        return ceiling_division(
            cls.get_min_excess_blobs_for_blob_gas_price(fork=fork, blob_gas_price=blob_gas_price),
            fork.max_blobs_per_block() - fork.target_blobs_per_block(),
        )
