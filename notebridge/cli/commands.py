"""CLI commands for notebridge.

The CLI is the single entry point: `run` keeps the bridge connected until
interrupted, `config` inspects the effective configuration.
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from notebridge import __logo__, __version__
from notebridge.bridge.types import ConnectionStatus
from notebridge.cli.command_groups.config_commands import register_config_commands
from notebridge.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from notebridge.config.loader import load_config
from notebridge.utils.exceptions import ConfigError

app = typer.Typer(
    name="notebridge",
    help=f"{__logo__} notebridge - bridge client for note automation",
    no_args_is_help=True,
)

console = Console()

_STATUS_STYLES = {
    ConnectionStatus.CONNECTED: "green",
    ConnectionStatus.CONNECTING: "yellow",
    ConnectionStatus.DISCONNECTED: "red",
}


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} notebridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """notebridge - bridge client for note automation."""
    pass


def _print_status(status: ConnectionStatus) -> None:
    style = _STATUS_STYLES.get(status, "white")
    console.print(f"Bridge status: [{style}]{status.value}[/{style}]")


@app.command()
def run(
    url: str = typer.Option(None, "--url", "-u", help="Bridge server websocket URL"),
    max_attempts: int = typer.Option(None, "--max-attempts", min=0, help="Give up after N reconnect attempts (default: never)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.notebridge/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """Connect to the bridge server and answer its requests until interrupted."""
    from notebridge.cli.services.bridge_service import BridgeRuntime

    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    level = "DEBUG" if verbose else config.logging.level
    configure_console_logging(level)
    if config.logging.file:
        log_path = ensure_rotating_log_file("bridge", level=level)
        console.print(f"[dim]Logs: {log_path}[/dim]")

    updates: dict = {}
    if url:
        updates["url"] = url
    if max_attempts is not None:
        updates["max_reconnect_attempts"] = max_attempts
    bridge_config = config.bridge.model_copy(update=updates) if updates else config.bridge

    console.print(f"{__logo__} Starting notebridge → {bridge_config.url}")
    runtime = BridgeRuntime(bridge_config, on_status_change=_print_status)
    try:
        asyncio.run(runtime.run())
    except KeyboardInterrupt:
        pass
    console.print("Bridge stopped.")


register_config_commands(app=app, console=console)


if __name__ == "__main__":
    app()
