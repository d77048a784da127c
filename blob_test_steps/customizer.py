"""Modification of the accounting fields of a produced payload."""

from dataclasses import dataclass, fields
from typing import Any, Dict, List

from blob_test_base_types import Bytes, Hash
from blob_test_rpc import ExecutionPayload


@dataclass(frozen=True)
class CustomPayloadData:
    """
    Field overrides applied to a payload before it is sent to a client.

    The block hash is recomputed from the modified header, so that the overridden field
    is the only inconsistency of the payload.
    """

    blob_gas_used: int | None = None
    excess_blob_gas: int | None = None
    parent_beacon_block_root: Hash | None = None
    timestamp: int | None = None

    def overrides(self) -> Dict[str, Any]:
        """Return the fields that are set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def apply(
        self,
        payload: ExecutionPayload,
        parent_beacon_block_root: Hash | None,
        execution_requests: List[Bytes] | None = None,
    ) -> tuple[ExecutionPayload, Hash | None]:
        """Return the customized payload and the beacon root to send along with it."""
        if self.parent_beacon_block_root is not None:
            parent_beacon_block_root = self.parent_beacon_block_root
        payload_overrides = {
            name: value
            for name, value in self.overrides().items()
            if name != "parent_beacon_block_root"
        }
        customized = payload.copy(**payload_overrides)
        block_hash = customized.compute_block_hash(parent_beacon_block_root, execution_requests)
        return customized.copy(block_hash=block_hash), parent_beacon_block_root

    def __str__(self) -> str:
        """Return the overridden fields, e.g. `blob_gas_used=1`."""
        return ", ".join(f"{name}={value}" for name, value in self.overrides().items())
