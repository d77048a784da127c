"""JSON-RPC methods used by the blob simulator to drive execution clients."""

import time
from itertools import count
from pprint import pformat
from typing import Any, ClassVar, Dict, Literal, Union

import requests
from jwt import encode
from pydantic import ValidationError

from blob_test_base_types import Bytes, Hash, to_json
from blob_test_types import BlobTransaction, NetworkWrappedTransaction
from pytest_plugins.logging import get_logger

from .types import (
    ForkchoiceState,
    ForkchoiceUpdateResponse,
    GetPayloadResponse,
    JSONRPCError,
    PayloadAttributes,
    PayloadStatus,
    TransactionByHashResponse,
)

BlockNumberType = Union[int, Literal["latest", "earliest", "pending"]]

DEFAULT_RPC_TIMEOUT = 30
# The secret used within clients in hive
DEFAULT_JWT_SECRET = b"secretsecretsecretsecretsecretse"

logger = get_logger(__name__)


class SendTransactionExceptionError(Exception):
    """Represent an exception that is raised when a transaction fails to be sent."""

    tx: BlobTransaction | None = None
    tx_rlp: Bytes | None = None

    def __init__(
        self, *args, tx: BlobTransaction | None = None, tx_rlp: Bytes | None = None
    ):
        """Initialize SendTransactionExceptionError class with the given transaction."""
        super().__init__(*args)
        self.tx = tx
        self.tx_rlp = tx_rlp

    def __str__(self):
        """Return string representation of the exception."""
        if self.tx is not None:
            return f"{super().__str__()} Transaction={self.tx.model_dump_json()}"
        if self.tx_rlp is not None:
            return f"{super().__str__()} Transaction RLP={self.tx_rlp.hex()}"
        return super().__str__()


class BaseRPC:
    """Represents a base RPC class for every RPC call used by the blob simulator."""

    namespace: ClassVar[str]
    timeout: float
    response_validation_context: Any | None

    def __init__(
        self,
        url: str,
        extra_headers: Dict | None = None,
        *,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        response_validation_context: Any | None = None,
    ):
        """Initialize BaseRPC class with the given url."""
        if extra_headers is None:
            extra_headers = {}
        self.url = url
        self.request_id_counter = count(1)
        self.extra_headers = extra_headers
        self.timeout = timeout
        self.response_validation_context = response_validation_context

    def __init_subclass__(cls) -> None:
        """Set namespace of the RPC class to the lowercase of the class name."""
        namespace = cls.__name__
        if namespace.endswith("RPC"):
            namespace = namespace[:-3]
        cls.namespace = namespace.lower()

    def __repr__(self) -> str:
        """Return the class name and the url."""
        return f"{self.__class__.__name__}({self.url})"

    def post_request(self, method: str, *params: Any, extra_headers: Dict | None = None) -> Any:
        """Send JSON-RPC POST request to the client RPC server at port defined in the url."""
        if extra_headers is None:
            extra_headers = {}
        assert self.namespace, "RPC namespace not set"

        payload = {
            "jsonrpc": "2.0",
            "method": f"{self.namespace}_{method}",
            "params": params,
            "id": next(self.request_id_counter),
        }
        base_header = {
            "Content-Type": "application/json",
        }
        headers = base_header | self.extra_headers | extra_headers

        logger.debug(f"{self.url} <- {payload['method']} (id={payload['id']})")
        response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        response_json = response.json()

        if "error" in response_json:
            logger.debug(f"{self.url} -> {payload['method']} error: {response_json['error']}")
            raise JSONRPCError(**response_json["error"])

        assert "result" in response_json, "RPC response didn't contain a result field"
        result = response_json["result"]
        return result


class EthRPC(BaseRPC):
    """Represents an `eth_X` RPC class for the default ethereum RPC methods used in the suite."""

    def get_block_by_number(self, block_number: BlockNumberType = "latest", full_txs: bool = True):
        """`eth_getBlockByNumber`: Returns information about a block by block number."""
        block = hex(block_number) if isinstance(block_number, int) else block_number
        return self.post_request("getBlockByNumber", block, full_txs)

    def get_transaction_by_hash(self, transaction_hash: Hash) -> TransactionByHashResponse | None:
        """`eth_getTransactionByHash`: Returns transaction details."""
        try:
            response = self.post_request("getTransactionByHash", f"{transaction_hash}")
            if response is None:
                return None
            return TransactionByHashResponse.model_validate(
                response, context=self.response_validation_context
            )
        except ValidationError as e:
            logger.error(pformat(e.errors()))
            raise e

    def send_transaction(self, transaction: BlobTransaction) -> Hash:
        """`eth_sendRawTransaction`: Send a blob transaction, with its blobs, to the client."""
        tx_rlp = NetworkWrappedTransaction(tx=transaction).rlp()
        try:
            result_hash = Hash(self.post_request("sendRawTransaction", f"{tx_rlp.hex()}"))
            assert result_hash == transaction.hash, (
                f"client returned hash {result_hash}, expected {transaction.hash}"
            )
            return transaction.hash
        except Exception as e:
            raise SendTransactionExceptionError(str(e), tx=transaction, tx_rlp=tx_rlp) from e


class EngineRPC(BaseRPC):
    """Represents an Engine API RPC class for every Engine API method used by the suite."""

    jwt_secret: bytes

    def __init__(self, *args, jwt_secret: bytes = DEFAULT_JWT_SECRET, **kwargs):
        """Initialize EngineRPC class with the secret used to sign its tokens."""
        super().__init__(*args, **kwargs)
        self.jwt_secret = jwt_secret

    def post_request(self, method: str, *params: Any, extra_headers: Dict | None = None) -> Any:
        """Send JSON-RPC POST request to the client RPC server at port defined in the url."""
        if extra_headers is None:
            extra_headers = {}
        jwt_token = encode(
            {"iat": int(time.time())},
            self.jwt_secret,
            algorithm="HS256",
        )
        extra_headers = {
            "Authorization": f"Bearer {jwt_token}",
        } | extra_headers
        return super().post_request(method, *params, extra_headers=extra_headers)

    def new_payload(self, *params: Any, version: int) -> PayloadStatus:
        """
        `engine_newPayloadVX`: Attempts to execute the given payload on an execution client.

        A `None` parameter is sent as JSON `null`, which is distinct from an empty list.
        """
        return PayloadStatus.model_validate(
            self.post_request(f"newPayloadV{version}", *[to_json(param) for param in params]),
            context=self.response_validation_context,
        )

    def forkchoice_updated(
        self,
        forkchoice_state: ForkchoiceState,
        payload_attributes: PayloadAttributes | None = None,
        *,
        version: int,
    ) -> ForkchoiceUpdateResponse:
        """`engine_forkchoiceUpdatedVX`: Updates the forkchoice state of the execution client."""
        return ForkchoiceUpdateResponse.model_validate(
            self.post_request(
                f"forkchoiceUpdatedV{version}",
                to_json(forkchoice_state),
                to_json(payload_attributes),
            ),
            context=self.response_validation_context,
        )

    def get_payload(
        self,
        payload_id: Bytes,
        *,
        version: int,
    ) -> GetPayloadResponse:
        """
        `engine_getPayloadVX`: Retrieves a payload that was requested through
        `engine_forkchoiceUpdatedVX`.
        """
        return GetPayloadResponse.model_validate(
            self.post_request(
                f"getPayloadV{version}",
                f"{payload_id}",
            ),
            context=self.response_validation_context,
        )
