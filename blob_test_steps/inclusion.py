"""
Prediction of the blob transactions included in the next payload.

A client fills a payload from its pending blob transactions as follows:

1. Only transactions whose `max_fee_per_blob_gas` covers the blob gas price of the
   payload are eligible.
2. The head transaction (lowest pending nonce) of every sender competes, highest
   `max_priority_fee_per_gas` first; ties go to the transaction sent first.
3. A head transaction that is not eligible, or whose blobs do not fit the remaining
   capacity, takes its sender out of the payload: later nonces cannot be included
   before it.
4. Transactions left out stay pending for the next payloads.

The blob gas price follows the excess blob gas carried from the parent payload, so the
model is fed every produced payload through `apply_payload`.
"""

from dataclasses import dataclass, field
from itertools import count
from typing import Dict, Iterable, Iterator, List

from blob_test_base_types import Address, Hash
from blob_test_forks import Fork
from blob_test_types import BlobID, BlobTransaction
from pytest_plugins.logging import get_logger

logger = get_logger(__name__)


@dataclass
class InclusionModel:
    """Pending blob transactions and blob gas accounting of the chain head."""

    pending: Dict[Address, Dict[int, BlobTransaction]] = field(default_factory=dict)
    submission_order: Dict[Hash, int] = field(default_factory=dict)
    parent_excess_blob_gas: int = 0
    parent_blob_gas_used: int = 0
    _counter: Iterator[int] = field(default_factory=count)

    def submit(self, tx: BlobTransaction) -> None:
        """Add a sent transaction, replacing a pending one of the same sender and nonce."""
        assert tx.sender is not None, "blob transaction must have a sender"
        sender = Address(tx.sender)
        queue = self.pending.setdefault(sender, {})
        if (replaced := queue.get(tx.nonce)) is not None:
            logger.debug(f"{tx.hash} replaces {replaced.hash} at nonce {tx.nonce} of {sender}")
        queue[int(tx.nonce)] = tx
        self.submission_order[tx.hash] = next(self._counter)

    def excess_blob_gas(self, fork: Fork) -> int:
        """Return the excess blob gas of the next payload."""
        if not fork.supports_blobs():
            return 0
        return fork.excess_blob_gas_calculator()(
            parent_excess_blob_gas=self.parent_excess_blob_gas,
            parent_blob_gas_used=self.parent_blob_gas_used,
        )

    def blob_gas_price(self, fork: Fork) -> int:
        """Return the blob gas price of the next payload."""
        return fork.blob_gas_price_calculator()(excess_blob_gas=self.excess_blob_gas(fork))

    def _queues(self) -> Dict[Address, List[BlobTransaction]]:
        return {
            sender: [txs[nonce] for nonce in sorted(txs)]
            for sender, txs in self.pending.items()
            if txs
        }

    def next_payload(self, fork: Fork) -> List[BlobTransaction]:
        """Return the transactions the next payload includes, in inclusion order."""
        if not fork.supports_blobs():
            return []
        blob_gas_price = self.blob_gas_price(fork)
        capacity = fork.max_blobs_per_block()
        queues = self._queues()
        selected: List[BlobTransaction] = []
        while queues:
            sender = max(
                queues,
                key=lambda s: (
                    queues[s][0].max_priority_fee_per_gas,
                    -self.submission_order[queues[s][0].hash],
                ),
            )
            tx = queues[sender][0]
            if tx.max_fee_per_blob_gas < blob_gas_price or tx.blob_count > capacity:
                del queues[sender]
                continue
            selected.append(tx)
            capacity -= tx.blob_count
            queues[sender].pop(0)
            if not queues[sender]:
                del queues[sender]
        return selected

    def expected_blob_ids(self, fork: Fork) -> List[BlobID]:
        """Return the blobs of the next payload, in bundle order."""
        return [blob_id for tx in self.next_payload(fork) for blob_id in tx.blob_ids]

    def apply_payload(
        self,
        included: Iterable[BlobTransaction],
        *,
        excess_blob_gas: int | None,
        blob_gas_used: int | None,
    ) -> None:
        """Drop the included transactions and make the payload the parent of the next one."""
        for tx in included:
            assert tx.sender is not None, "blob transaction must have a sender"
            queue = self.pending.get(Address(tx.sender), {})
            queue.pop(int(tx.nonce), None)
        self.parent_excess_blob_gas = excess_blob_gas or 0
        self.parent_blob_gas_used = blob_gas_used or 0

    @property
    def pending_count(self) -> int:
        """Return the number of pending transactions."""
        return sum(len(txs) for txs in self.pending.values())
