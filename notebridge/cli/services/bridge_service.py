"""Bridge runtime used by the `run` command: client + default actions + signal handling."""

from __future__ import annotations

import asyncio
import signal
from typing import Any, Callable

from notebridge.bridge.client import BridgeClient
from notebridge.bridge.router import ActionRouter, install_status_action
from notebridge.bridge.types import ConnectionStatus
from notebridge.config.schema import BridgeConfig


def build_default_router(client: BridgeClient) -> ActionRouter:
    """Router with the actions the standalone runtime answers itself."""
    router = ActionRouter()

    @router.action("ping")
    def ping(_payload: dict[str, Any]) -> dict[str, Any]:
        return {"pong": True}

    @router.action("echo")
    def echo(payload: dict[str, Any]) -> dict[str, Any]:
        return dict(payload)

    install_status_action(router, client)
    return router


class BridgeRuntime:
    """Owns one BridgeClient for the lifetime of a CLI process."""

    def __init__(
        self,
        bridge_config: BridgeConfig,
        *,
        on_status_change: Callable[[ConnectionStatus], None] | None = None,
        client_factory: Callable[..., BridgeClient] = BridgeClient,
    ):
        self.bridge_config = bridge_config
        self.client = client_factory(bridge_config.to_client_config(on_status_change=on_status_change))
        self.router = build_default_router(self.client)
        self.client.set_handler(self.router)
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    async def run(self, install_signal_handlers: bool = True) -> None:
        """Connect, wait for stop() or SIGINT/SIGTERM, then shut down cleanly."""
        if install_signal_handlers:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, self.stop)
                except (NotImplementedError, RuntimeError):
                    pass
        self.client.connect()
        try:
            await self._stop.wait()
        finally:
            await self.client.aclose()
