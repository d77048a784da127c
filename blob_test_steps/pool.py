"""Ledger of the blob transactions sent during a test case."""

from threading import Lock
from typing import Dict

from blob_test_base_types import Hash
from blob_test_types import BlobTransaction


class TestBlobTxPool:
    """
    Blob transactions sent to the clients, keyed by hash.

    This is not a mempool: nothing is ever evicted or ranked. It lets later steps recover
    the exact transaction that was sent, to compare it with what a client reports.
    """

    __test__ = False  # stop pytest from collecting this class as a test

    _transactions: Dict[Hash, BlobTransaction]
    _lock: Lock

    def __init__(self) -> None:
        """Initialize an empty pool."""
        self._transactions = {}
        self._lock = Lock()

    def add(self, tx: BlobTransaction) -> None:
        """Record a sent transaction, overwriting any previous record of the same hash."""
        with self._lock:
            self._transactions[tx.hash] = tx

    def lookup(self, tx_hash: Hash) -> BlobTransaction | None:
        """Return the transaction sent with the given hash, if any."""
        with self._lock:
            return self._transactions.get(Hash(tx_hash))

    def __len__(self) -> int:
        """Return the number of recorded transactions."""
        with self._lock:
            return len(self._transactions)
