"""Websocket transport used by the connection manager.

A transport socket is a single connection attempt. It reports four kinds of
events (open, message, close, error) through ``TransportEvents``; the events
are always delivered from the event loop, never from inside the constructor.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed
from websockets.uri import parse_uri

NORMAL_CLOSURE = 1000
NO_STATUS_RECEIVED = 1005
ABNORMAL_CLOSURE = 1006


class SocketState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class TransportSocket(Protocol):
    @property
    def state(self) -> SocketState: ...

    def send(self, data: str) -> bool: ...

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None: ...


@dataclass(frozen=True)
class TransportEvents:
    on_open: Callable[[TransportSocket], None]
    on_message: Callable[[TransportSocket, str | bytes], None]
    on_close: Callable[[TransportSocket, int, str], None]
    on_error: Callable[[TransportSocket, BaseException], None]


TransportFactory = Callable[[str, TransportEvents], TransportSocket]


class WebSocketTransport:
    """One websocket connection attempt driven by a background task."""

    def __init__(
        self,
        url: str,
        events: TransportEvents,
        *,
        open_timeout: float = 10.0,
        ping_interval: float | None = 20.0,
        ping_timeout: float | None = 20.0,
    ):
        # Invalid URIs and a missing event loop fail here, synchronously.
        parse_uri(url)
        loop = asyncio.get_running_loop()

        self.url = url
        self._events = events
        self._open_timeout = open_timeout
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._state = SocketState.CONNECTING
        self._ws: Any = None
        self._close_request: tuple[int, str] | None = None
        self._close_task: asyncio.Task | None = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._task = loop.create_task(self._run())
        self._task.add_done_callback(self._on_task_done)

    @property
    def state(self) -> SocketState:
        return self._state

    def send(self, data: str) -> bool:
        """Queue a text frame; returns False when the socket is not open."""
        if self._state is not SocketState.OPEN:
            return False
        self._outbox.put_nowait(data)
        return True

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        if self._state in (SocketState.CLOSING, SocketState.CLOSED):
            return
        previous = self._state
        self._state = SocketState.CLOSING
        self._close_request = (code, reason)
        if previous is SocketState.CONNECTING:
            self._task.cancel()
            return
        ws = self._ws
        if ws is not None:
            self._close_task = asyncio.get_running_loop().create_task(ws.close(code=code, reason=reason))

    def _on_task_done(self, _task: asyncio.Task) -> None:
        # A task cancelled before its first step never reaches _run's finally.
        if self._state is not SocketState.CLOSED:
            self._state = SocketState.CLOSED
            code, reason = self._close_request or (ABNORMAL_CLOSURE, "")
            self._events.on_close(self, code, reason)

    async def _drain_outbox(self, ws: Any) -> None:
        while True:
            data = await self._outbox.get()
            try:
                await ws.send(data)
            except Exception as e:
                logger.debug(f"Websocket send dropped: {e}")
                return

    async def _run(self) -> None:
        code, reason = ABNORMAL_CLOSURE, ""
        try:
            async with websockets.connect(
                self.url,
                open_timeout=self._open_timeout,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
            ) as ws:
                self._ws = ws
                if self._state is SocketState.CLOSING and self._close_request is not None:
                    await ws.close(code=self._close_request[0], reason=self._close_request[1])
                else:
                    self._state = SocketState.OPEN
                    self._events.on_open(self)
                writer = asyncio.create_task(self._drain_outbox(ws))
                try:
                    async for raw in ws:
                        self._events.on_message(self, raw)
                finally:
                    writer.cancel()
            code = ws.close_code if ws.close_code is not None else NO_STATUS_RECEIVED
            reason = ws.close_reason or ""
        except ConnectionClosed as e:
            # Peer went away mid-read; report its close frame, not an error.
            if e.rcvd is not None:
                code, reason = e.rcvd.code, e.rcvd.reason
        except asyncio.CancelledError:
            if self._close_request is not None:
                code, reason = self._close_request
            raise
        except Exception as e:
            reason = str(e)
            self._events.on_error(self, e)
        finally:
            self._state = SocketState.CLOSED
            self._ws = None
            self._events.on_close(self, code, reason)
