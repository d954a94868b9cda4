"""Connection lifecycle and reconnection policy for the bridge client."""

from __future__ import annotations

import asyncio
import random
from typing import Any, Callable, Protocol

from loguru import logger

from notebridge.bridge.transport import (
    NORMAL_CLOSURE,
    SocketState,
    TransportEvents,
    TransportFactory,
    TransportSocket,
    WebSocketTransport,
)
from notebridge.bridge.types import ClientConfig, ConnectionStatus, LogFn

JITTER_RATIO = 0.3
# 2**32 times any sane initial delay is far beyond any max delay.
_MAX_BACKOFF_EXPONENT = 32


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]
MessageSink = Callable[[TransportSocket, "str | bytes"], None]


def _loop_call_later(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay_s, callback)


def backoff_base_delay_ms(attempts: int, initial_ms: float, max_ms: float) -> float:
    """Exponential delay before jitter: ``min(initial * 2**attempts, max)``."""
    exponent = min(max(attempts, 0), _MAX_BACKOFF_EXPONENT)
    return min(initial_ms * (2**exponent), max_ms)


class ConnectionManager:
    """Owns the transport socket, connection status and reconnect timer.

    Knows nothing about message content: inbound frames are handed to
    ``on_message`` together with the socket they arrived on.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        log: LogFn,
        on_message: MessageSink | None = None,
        transport_factory: TransportFactory | None = None,
        timer_factory: TimerFactory | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self._log = log
        self._on_message = on_message
        self._transport_factory: TransportFactory = transport_factory or WebSocketTransport
        self._timer_factory: TimerFactory = timer_factory or _loop_call_later
        self._rng = rng or random.Random()

        self._socket: TransportSocket | None = None
        self._reconnect_attempts = 0
        self._reconnect_timer: TimerHandle | None = None
        self._shutting_down = False
        self._status = ConnectionStatus.DISCONNECTED

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def socket(self) -> TransportSocket | None:
        return self._socket

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_timer is not None

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def _set_status(self, status: ConnectionStatus) -> None:
        if self._status == status:
            return
        self._status = status
        observer = self.config.on_status_change
        if observer is None:
            return
        try:
            observer(status)
        except Exception:
            logger.exception("Status observer failed for {}", status.value)

    def connect(self) -> None:
        """Open a new socket unless one is already open or opening."""
        current = self._socket
        if current is not None and current.state in (SocketState.CONNECTING, SocketState.OPEN):
            return

        self._shutting_down = False
        self._cancel_reconnect_timer()
        self._set_status(ConnectionStatus.CONNECTING)
        self._log(f"Connecting to {self.config.url}...")

        events = TransportEvents(
            on_open=self._handle_open,
            on_message=self._handle_message,
            on_close=self._handle_close,
            on_error=self._handle_error,
        )
        try:
            self._socket = self._transport_factory(self.config.url, events)
        except Exception as e:
            self._socket = None
            self._log(f"Connection failed: {e}", "error")
            self._set_status(ConnectionStatus.DISCONNECTED)
            self.schedule_reconnect()

    def disconnect(self) -> None:
        """Close on purpose; no reconnect follows until connect() is called."""
        self._shutting_down = True
        self._cancel_reconnect_timer()
        sock, self._socket = self._socket, None
        if sock is not None:
            sock.close(NORMAL_CLOSURE, "Client disconnect")
        self._set_status(ConnectionStatus.DISCONNECTED)

    def reconnect(self) -> None:
        """Reset the backoff and force a fresh disconnect/connect cycle."""
        self._reconnect_attempts = 0
        self.disconnect()
        self.connect()

    def schedule_reconnect(self) -> float | None:
        """Arm the reconnect timer; returns the delay in ms or None if not armed."""
        if self._shutting_down:
            return None

        max_attempts = self.config.max_reconnect_attempts
        if max_attempts is not None and self._reconnect_attempts >= max_attempts:
            self._log("Max reconnection attempts reached", "error")
            return None

        base = backoff_base_delay_ms(
            self._reconnect_attempts,
            self.config.initial_reconnect_delay_ms,
            self.config.max_reconnect_delay_ms,
        )
        delay = base + self._rng.random() * JITTER_RATIO * base

        self._cancel_reconnect_timer()
        try:
            self._reconnect_timer = self._timer_factory(delay / 1000.0, self._on_reconnect_timer)
        except RuntimeError as e:
            # No running event loop: nothing can fire the timer.
            self._log(f"Cannot schedule reconnect: {e}", "error")
            return None

        self._reconnect_attempts += 1
        limit = "unlimited" if max_attempts is None else str(max_attempts)
        self._log(f"Reconnecting in {round(delay)}ms (attempt {self._reconnect_attempts}/{limit})")
        return delay

    def _on_reconnect_timer(self) -> None:
        self._reconnect_timer = None
        self.connect()

    def _cancel_reconnect_timer(self) -> None:
        timer, self._reconnect_timer = self._reconnect_timer, None
        if timer is not None:
            timer.cancel()

    # Events from a socket that is no longer current (e.g. the one closed by
    # reconnect()) must not touch status or the reconnect schedule.

    def _handle_open(self, sock: TransportSocket) -> None:
        if sock is not self._socket:
            return
        self._log("Connected to bridge server")
        self._reconnect_attempts = 0
        self._set_status(ConnectionStatus.CONNECTED)

    def _handle_message(self, sock: TransportSocket, data: str | bytes) -> None:
        if self._on_message is not None:
            self._on_message(sock, data)

    def _handle_close(self, sock: TransportSocket, code: int, reason: str) -> None:
        if sock is not self._socket:
            return
        self._socket = None
        self._log(f"Disconnected: {code} {reason}".rstrip(), "warn")
        self._set_status(ConnectionStatus.DISCONNECTED)
        if not self._shutting_down:
            self.schedule_reconnect()

    def _handle_error(self, sock: TransportSocket, error: BaseException) -> None:
        if sock is not self._socket:
            return
        self._log(f"WebSocket error: {error}", "error")

    def describe(self) -> dict[str, Any]:
        return {
            "url": self.config.url,
            "status": self._status.value,
            "reconnectAttempts": self._reconnect_attempts,
            "reconnectPending": self.reconnect_pending,
        }
