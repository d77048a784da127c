"""
Genesis file the execution clients of a blob test case are started with.

Hive reads the chain configuration from the `HIVE_*` environment variables, so the file
only holds the genesis header fields and the allocation.
"""

from typing import Dict, List

from blob_test_base_types import Address, Bytes, CamelModel, Hash, HexNumber, to_json
from blob_test_forks import ForkSchedule
from blob_test_types import EOA
from config import BlobSuiteConfig


class GenesisAccount(CamelModel):
    """An account of the genesis allocation."""

    balance: HexNumber = HexNumber(0)
    nonce: HexNumber = HexNumber(0)
    code: Bytes | None = None


class ClientGenesis(CamelModel):
    """The content of `/genesis.json`."""

    nonce: HexNumber = HexNumber(0)
    timestamp: HexNumber = HexNumber(0)
    extra_data: Bytes = Bytes(b"")
    gas_limit: HexNumber
    difficulty: HexNumber = HexNumber(0)
    mix_hash: Hash = Hash(0)
    coinbase: Address = Address(0)
    number: HexNumber = HexNumber(0)
    parent_hash: Hash = Hash(0)
    base_fee_per_gas: HexNumber
    blob_gas_used: HexNumber | None = None
    excess_blob_gas: HexNumber | None = None
    alloc: Dict[str, GenesisAccount]


def allocation_key(address: Address) -> str:
    """Return the allocation key of an address; nethermind requires it without `0x`."""
    return str(address).removeprefix("0x")


def build_client_genesis(
    fork_schedule: ForkSchedule,
    accounts: List[EOA],
    config: BlobSuiteConfig,
) -> dict:
    """
    Return the genesis of a test case as JSON data.

    The test accounts are funded and the system contracts of the blob fork are deployed.
    The blob header fields are set only if the blob fork is active at genesis.
    """
    alloc = {
        allocation_key(account): GenesisAccount(balance=config.TEST_ACCOUNT_BALANCE)
        for account in accounts
    }
    for address, account in fork_schedule.fork.pre_allocation_blockchain().items():
        alloc[allocation_key(Address(address))] = GenesisAccount(**account)

    genesis = ClientGenesis(
        gas_limit=config.GENESIS_GAS_LIMIT,
        base_fee_per_gas=config.GENESIS_BASE_FEE_PER_GAS,
        alloc=alloc,
    )
    if fork_schedule.fork_at(0).header_blob_fields_required():
        genesis.blob_gas_used = HexNumber(0)
        genesis.excess_blob_gas = HexNumber(0)
    return to_json(genesis)
