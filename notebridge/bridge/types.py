"""Shared value types for the bridge client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Literal


class ConnectionStatus(str, Enum):
    """Transport state reported to status observers."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


LogLevel = Literal["info", "warn", "error"]

RequestId = str | int | float | None


@dataclass(frozen=True)
class BridgeRequest:
    """Canonical inbound call, independent of the wire format it arrived in."""

    id: RequestId
    action: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Success:
    result: Any = None


@dataclass(frozen=True)
class Failure:
    message: str


Outcome = Success | Failure

RequestHandler = Callable[[BridgeRequest], Awaitable[Any] | Any]
StatusObserver = Callable[[ConnectionStatus], None]
LogObserver = Callable[[str, LogLevel], None]
LogFn = Callable[..., None]


@dataclass
class ClientConfig:
    """Connection parameters for one BridgeClient.

    ``max_reconnect_attempts`` of ``None`` means the client never gives up.
    Delays are in milliseconds.
    """

    url: str
    max_reconnect_attempts: int | None = None
    initial_reconnect_delay_ms: float = 1000.0
    max_reconnect_delay_ms: float = 30000.0
    on_status_change: StatusObserver | None = None
    on_log: LogObserver | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url is required")
        if self.max_reconnect_attempts is not None and self.max_reconnect_attempts < 0:
            raise ValueError("max_reconnect_attempts must be non-negative")
        if self.initial_reconnect_delay_ms < 0:
            raise ValueError("initial_reconnect_delay_ms must be non-negative")
        if self.max_reconnect_delay_ms < self.initial_reconnect_delay_ms:
            raise ValueError("max_reconnect_delay_ms must be >= initial_reconnect_delay_ms")
