"""Config command group."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from notebridge.config.loader import get_config_path, load_config
from notebridge.utils.exceptions import ConfigError


def register_config_commands(app: typer.Typer, console: Console) -> None:
    """Register the `config` command group."""
    config_app = typer.Typer(help="Inspect the effective configuration")
    app.add_typer(config_app, name="config")

    @config_app.command("show")
    def config_show(
        config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.notebridge/config.json)"),
        as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
    ) -> None:
        path = config_path or get_config_path()
        try:
            config = load_config(path)
        except ConfigError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(1)

        if as_json:
            console.print_json(data=config.model_dump())
            return

        table = Table(title=f"Bridge config ({path}{'' if path.exists() else ', defaults'})")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        bridge = config.bridge
        attempts = "unlimited" if bridge.max_reconnect_attempts is None else str(bridge.max_reconnect_attempts)
        table.add_row("url", bridge.url)
        table.add_row("maxReconnectAttempts", attempts)
        table.add_row("initialReconnectDelayMs", f"{bridge.initial_reconnect_delay_ms:g}")
        table.add_row("maxReconnectDelayMs", f"{bridge.max_reconnect_delay_ms:g}")
        table.add_row("logging.level", config.logging.level)
        table.add_row("logging.file", str(config.logging.file))
        console.print(table)

    @config_app.command("path")
    def config_path_cmd() -> None:
        console.print(str(get_config_path()))
