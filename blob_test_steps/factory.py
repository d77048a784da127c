"""Construction and submission of blob transactions."""

from typing import List

from blob_test_base_types import Address
from blob_test_types import EOA, BlobID, BlobTransaction
from pytest_plugins.logging import get_logger

from .context import BlobTestContext
from .exceptions import InvalidStepError
from .verify import verify_transaction_from_node

logger = get_logger(__name__)


def build_blob_transaction(
    ctx: BlobTestContext,
    sender: EOA,
    nonce: int,
    blob_ids: List[BlobID],
    *,
    max_fee_per_blob_gas: int,
    gas_fee_cap: int | None = None,
    gas_tip_cap: int | None = None,
) -> BlobTransaction:
    """Return a signed transaction carrying the blobs with the given ids."""
    blobs = ctx.blob_generator.blobs(blob_ids)
    tx = BlobTransaction(
        chain_id=ctx.chain_id,
        nonce=nonce,
        max_priority_fee_per_gas=(
            gas_tip_cap if gas_tip_cap is not None else ctx.config.GAS_TIP_CAP
        ),
        max_fee_per_gas=gas_fee_cap if gas_fee_cap is not None else ctx.config.GAS_FEE_CAP,
        gas_limit=ctx.config.BLOB_TRANSACTION_GAS_LIMIT,
        to=Address(
            ctx.config.DATAHASH_START_ADDRESS + blob_ids[0] % ctx.config.DATAHASH_ADDRESS_COUNT
        ),
        max_fee_per_blob_gas=max_fee_per_blob_gas,
        blob_versioned_hashes=[blob.versioned_hash() for blob in blobs],
        blobs=blobs,
        sender=sender,
    )
    tx.sign()
    return tx


def send_blob_transactions(
    ctx: BlobTestContext,
    *,
    transaction_count: int = 1,
    blobs_per_transaction: int = 1,
    max_blob_gas_cost: int | None = None,
    gas_fee_cap: int | None = None,
    gas_tip_cap: int | None = None,
    replace: bool = False,
    account_index: int = 0,
    client_index: int = 0,
) -> List[BlobTransaction]:
    """
    Send blob transactions from one account to one client.

    With `replace`, every transaction reuses the last nonce issued to the account, so
    that it competes with the transaction sent before it. `max_blob_gas_cost` becomes
    the `max_fee_per_blob_gas` of the transactions; when unset, the blob gas price of
    the next payload is used, the smallest fee that lets the transactions in right away.

    Each transaction is fetched back from the client and compared with what was sent. A
    rejected submission raises immediately.
    """
    if blobs_per_transaction < 1:
        raise InvalidStepError(
            f"a blob transaction carries at least one blob, not {blobs_per_transaction}"
        )
    sender = ctx.account(account_index)
    client = ctx.client(client_index)
    if replace and sender.nonce == 0:
        raise InvalidStepError(f"account {account_index} sent no transaction to replace")
    fork = ctx.fork
    if max_blob_gas_cost is None:
        max_blob_gas_cost = ctx.inclusion.blob_gas_price(fork)

    sent: List[BlobTransaction] = []
    for _ in range(transaction_count):
        nonce = sender.previous_nonce() if replace else sender.get_nonce()
        tx = build_blob_transaction(
            ctx,
            sender,
            nonce,
            ctx.allocate_blob_ids(blobs_per_transaction),
            max_fee_per_blob_gas=max_blob_gas_cost,
            gas_fee_cap=gas_fee_cap,
            gas_tip_cap=gas_tip_cap,
        )
        client.eth.send_transaction(tx)
        logger.verbose(
            f"Sent {tx.hash} to {client}: nonce {nonce} of {Address(sender)}, "
            f"blobs {tx.blob_ids}"
        )
        ctx.pool.add(tx)
        ctx.inclusion.submit(tx)
        verify_transaction_from_node(client.eth, tx, fork.blob_gas_per_blob())
        sent.append(tx)
    return sent
