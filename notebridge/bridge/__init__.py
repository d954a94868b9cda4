"""Bridge client: connection lifecycle, protocol normalization and dispatch."""

from notebridge.bridge.client import BridgeClient
from notebridge.bridge.connection import ConnectionManager
from notebridge.bridge.dispatcher import RequestDispatcher
from notebridge.bridge.protocol import ProtocolNormalizer, classify_message
from notebridge.bridge.router import ActionRouter, install_status_action
from notebridge.bridge.types import (
    BridgeRequest,
    ClientConfig,
    ConnectionStatus,
    Failure,
    Success,
)

__all__ = [
    "ActionRouter",
    "BridgeClient",
    "BridgeRequest",
    "ClientConfig",
    "ConnectionManager",
    "ConnectionStatus",
    "Failure",
    "ProtocolNormalizer",
    "RequestDispatcher",
    "Success",
    "classify_message",
    "install_status_action",
]
