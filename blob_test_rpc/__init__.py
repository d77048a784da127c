"""JSON-RPC methods and Engine API types used by the blob simulator."""

from .rpc import (
    DEFAULT_JWT_SECRET,
    DEFAULT_RPC_TIMEOUT,
    BaseRPC,
    BlockNumberType,
    EngineRPC,
    EthRPC,
    SendTransactionExceptionError,
)
from .types import (
    BlobsBundle,
    EngineAPIError,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdateResponse,
    GetPayloadResponse,
    JSONRPCError,
    PayloadAttributes,
    PayloadStatus,
    PayloadStatusEnum,
    TransactionByHashResponse,
)

__all__ = [
    "DEFAULT_JWT_SECRET",
    "DEFAULT_RPC_TIMEOUT",
    "BaseRPC",
    "BlobsBundle",
    "BlockNumberType",
    "EngineAPIError",
    "EngineRPC",
    "EthRPC",
    "ExecutionPayload",
    "ForkchoiceState",
    "ForkchoiceUpdateResponse",
    "GetPayloadResponse",
    "JSONRPCError",
    "PayloadAttributes",
    "PayloadStatus",
    "PayloadStatusEnum",
    "SendTransactionExceptionError",
    "TransactionByHashResponse",
]
