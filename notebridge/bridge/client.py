"""Bridge client: persistent connection plus dual-protocol request dispatch."""

from __future__ import annotations

import asyncio
import random
from typing import Any

from loguru import logger

from notebridge.bridge.connection import ConnectionManager, TimerFactory
from notebridge.bridge.dispatcher import RequestDispatcher
from notebridge.bridge.protocol import ProtocolNormalizer, SendFn
from notebridge.bridge.transport import TransportFactory, TransportSocket
from notebridge.bridge.types import (
    ClientConfig,
    ConnectionStatus,
    LogLevel,
    Outcome,
    RequestHandler,
)

_LOGURU_LEVELS: dict[str, str] = {
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
}


class BridgeClient:
    """Keeps one connection to the bridge server and answers its requests.

    Usage::

        client = BridgeClient(ClientConfig(url="ws://127.0.0.1:3002"))
        client.set_handler(router)
        client.connect()
        ...
        await client.aclose()
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport_factory: TransportFactory | None = None,
        timer_factory: TimerFactory | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self._normalizer = ProtocolNormalizer(log=self._log)
        self._dispatcher = RequestDispatcher(log=self._log)
        self._connection = ConnectionManager(
            config,
            log=self._log,
            on_message=self._on_socket_message,
            transport_factory=transport_factory,
            timer_factory=timer_factory,
            rng=rng,
        )
        self._inflight: set[asyncio.Task] = set()

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def _log(self, message: str, level: LogLevel = "info") -> None:
        logger.opt(depth=1).log(_LOGURU_LEVELS.get(level, "INFO"), message)
        observer = self.config.on_log
        if observer is None:
            return
        try:
            observer(message, level)
        except Exception:
            logger.exception("Log observer failed")

    def connect(self) -> None:
        self._connection.connect()

    def disconnect(self) -> None:
        self._connection.disconnect()

    def reconnect(self) -> None:
        self._connection.reconnect()

    def set_handler(self, handler: RequestHandler | None) -> None:
        self._dispatcher.set_handler(handler)

    def get_status(self) -> ConnectionStatus:
        return self._connection.status

    async def process_message(self, data: str | bytes, send: SendFn) -> Outcome | None:
        """Normalize one raw frame and, if it is a request, dispatch it to completion."""
        normalized = self._normalizer.normalize(data, send)
        if normalized is None:
            return None
        return await self._dispatcher.dispatch(normalized.request, normalized.respond)

    def _on_socket_message(self, sock: TransportSocket, data: str | bytes) -> None:
        # Heartbeats are answered synchronously in normalize(); only real
        # requests get a task, one per request, so handlers run concurrently.
        try:
            normalized = self._normalizer.normalize(data, sock.send)
            if normalized is None:
                return
            task = asyncio.get_running_loop().create_task(
                self._dispatcher.dispatch(normalized.request, normalized.respond)
            )
        except Exception as e:
            # A bad frame must never reach the transport read loop.
            self._log(f"Failed to process message: {e}", "error")
            return
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def wait_idle(self) -> None:
        """Wait until every in-flight dispatch has finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        self.disconnect()
        await self.wait_idle()

    async def __aenter__(self) -> "BridgeClient":
        self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
