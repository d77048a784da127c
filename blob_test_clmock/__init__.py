"""Consensus layer mock driving payload production on the execution clients."""

from .clmock import (
    ENGINE_PORT,
    ETH_PORT,
    CLMock,
    CLMockError,
    CLMockTimeoutError,
    EngineClient,
    new_payload_params,
)

__all__ = [
    "CLMock",
    "CLMockError",
    "CLMockTimeoutError",
    "ENGINE_PORT",
    "ETH_PORT",
    "EngineClient",
    "new_payload_params",
]
