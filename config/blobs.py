"""
A module for managing the configuration of the blob simulator.

Classes:
- BlobSuiteConfig: Suite-wide defaults of the blob transactions and the client endpoints.
"""

from pydantic import BaseModel


class BlobSuiteConfig(BaseModel):
    """A class for accessing the defaults used by the blob test steps."""

    GAS_FEE_CAP: int = 30 * 10**9
    """The default `max_fee_per_gas` of the blob transactions (30 gwei)."""

    GAS_TIP_CAP: int = 10**9
    """The default `max_priority_fee_per_gas` of the blob transactions (1 gwei)."""

    BLOB_TRANSACTION_GAS_LIMIT: int = 100_000
    """The gas limit of every blob transaction."""

    TEST_ACCOUNT_BALANCE: int = 10**26
    """The genesis balance of each funded test account (100 million ether)."""

    JWT_SECRET: bytes = b"secretsecretsecretsecretsecretse"
    """The secret shared with the clients to sign Engine API tokens, as hive configures it."""

    ETH_PORT: int = 8545
    """The port of the `eth` JSON-RPC namespace."""

    ENGINE_PORT: int = 8551
    """The port of the authenticated Engine API."""

    GENESIS_GAS_LIMIT: int = 30_000_000
    """The gas limit of the genesis block."""

    GENESIS_BASE_FEE_PER_GAS: int = 7
    """The base fee of the genesis block."""

    DATAHASH_START_ADDRESS: int = 0x100
    """The first destination address of the blob transactions."""

    DATAHASH_ADDRESS_COUNT: int = 1000
    """The number of destination addresses, assigned by the first blob id of each transaction."""
