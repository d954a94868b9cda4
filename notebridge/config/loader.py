"""Configuration loading utilities."""

import json
import math
from pathlib import Path
from typing import Any

from notebridge.config.schema import Config
from notebridge.utils.exceptions import ConfigError


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".notebridge" / "config.json"


def get_data_dir() -> Path:
    """Get the notebridge data directory."""
    path = Path.home() / ".notebridge"
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or fall back to defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config file must be a JSON object")
            data = _migrate_config(data)
            return Config.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            raise ConfigError(
                f"Failed to load config from {path}: {e}. "
                "Fix the file or remove it to use defaults.",
                path=str(path),
            ) from e

    return Config()


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    bridge = data.setdefault("bridge", {})
    if not isinstance(bridge, dict):
        return data
    # Flat plugin-style settings: {"wsUrl": "..."} → bridge.url
    ws_url = data.pop("wsUrl", None)
    if isinstance(ws_url, str) and ws_url.strip() and "url" not in bridge:
        bridge["url"] = ws_url.strip()
    # bridge.reconnect: {initialDelaySeconds, maxDelaySeconds, maxAttempts}
    reconnect = bridge.pop("reconnect", None)
    if isinstance(reconnect, dict):
        seconds_fields = {
            "initialDelaySeconds": "initialReconnectDelayMs",
            "maxDelaySeconds": "maxReconnectDelayMs",
        }
        for src, dst in seconds_fields.items():
            value = reconnect.get(src)
            if isinstance(value, (int, float)) and dst not in bridge:
                bridge[dst] = float(value) * 1000.0
        if "maxAttempts" in reconnect and "maxReconnectAttempts" not in bridge:
            bridge["maxReconnectAttempts"] = reconnect["maxAttempts"]
    # Infinity / "unlimited" both mean "never give up".
    attempts = bridge.get("maxReconnectAttempts")
    if isinstance(attempts, float) and math.isinf(attempts):
        bridge["maxReconnectAttempts"] = None
    elif isinstance(attempts, str) and attempts.strip().lower() in {"unlimited", "infinity", "inf"}:
        bridge["maxReconnectAttempts"] = None
    return data


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
