import json
import math

import pytest

from notebridge.config.loader import _migrate_config, camel_to_snake, load_config
from notebridge.config.schema import BridgeConfig, Config
from notebridge.utils.exceptions import ConfigError


def test_bridge_defaults_exist() -> None:
    cfg = Config()
    assert cfg.bridge.url == "ws://127.0.0.1:3002"
    assert cfg.bridge.max_reconnect_attempts is None
    assert cfg.bridge.initial_reconnect_delay_ms == 1000.0
    assert cfg.bridge.max_reconnect_delay_ms == 30000.0
    assert cfg.logging.level == "INFO"


def test_missing_file_gives_defaults(tmp_path) -> None:
    cfg = load_config(tmp_path / "nope.json")
    assert cfg.bridge.url == "ws://127.0.0.1:3002"


def test_load_camel_case_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "bridge": {
                    "url": "ws://10.0.0.5:4000",
                    "maxReconnectAttempts": 5,
                    "initialReconnectDelayMs": 250,
                    "maxReconnectDelayMs": 8000,
                },
                "logging": {"level": "DEBUG", "file": False},
            }
        )
    )
    cfg = load_config(path)
    assert cfg.bridge.url == "ws://10.0.0.5:4000"
    assert cfg.bridge.max_reconnect_attempts == 5
    assert cfg.bridge.initial_reconnect_delay_ms == 250
    assert cfg.bridge.max_reconnect_delay_ms == 8000
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.file is False


def test_migrate_flat_ws_url_and_reconnect_block() -> None:
    data = {
        "wsUrl": " ws://bridge.local:3002 ",
        "bridge": {"reconnect": {"initialDelaySeconds": 2, "maxDelaySeconds": 60, "maxAttempts": 10}},
    }
    migrated = _migrate_config(data)
    bridge = migrated["bridge"]
    assert "wsUrl" not in migrated
    assert bridge["url"] == "ws://bridge.local:3002"
    assert bridge["initialReconnectDelayMs"] == 2000.0
    assert bridge["maxReconnectDelayMs"] == 60000.0
    assert bridge["maxReconnectAttempts"] == 10
    assert "reconnect" not in bridge


def test_migrate_keeps_explicit_new_keys() -> None:
    data = {"wsUrl": "ws://old", "bridge": {"url": "ws://new", "reconnect": {"maxAttempts": 1}, "maxReconnectAttempts": 4}}
    bridge = _migrate_config(data)["bridge"]
    assert bridge["url"] == "ws://new"
    assert bridge["maxReconnectAttempts"] == 4


@pytest.mark.parametrize("value", ["unlimited", "Infinity", " inf ", math.inf])
def test_unlimited_attempts_spellings(value) -> None:
    bridge = _migrate_config({"bridge": {"maxReconnectAttempts": value}})["bridge"]
    assert bridge["maxReconnectAttempts"] is None


def test_invalid_delays_raise_config_error(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bridge": {"initialReconnectDelayMs": 5000, "maxReconnectDelayMs": 100}}))
    with pytest.raises(ConfigError) as exc_info:
        load_config(path)
    assert exc_info.value.details == {"path": str(path)}


def test_negative_attempts_raise_config_error(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bridge": {"maxReconnectAttempts": -1}}))
    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize("body", ["{not json", "[1, 2]"])
def test_malformed_file_raises_config_error(tmp_path, body: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(body)
    with pytest.raises(ConfigError):
        load_config(path)


def test_env_overrides_defaults(monkeypatch) -> None:
    monkeypatch.setenv("NOTEBRIDGE_BRIDGE__URL", "ws://from-env:9000")
    monkeypatch.setenv("NOTEBRIDGE_LOGGING__LEVEL", "WARNING")
    cfg = Config()
    assert cfg.bridge.url == "ws://from-env:9000"
    assert cfg.logging.level == "WARNING"


def test_to_client_config_carries_observers() -> None:
    seen = []
    client_cfg = BridgeConfig(url="ws://x", max_reconnect_attempts=2).to_client_config(on_status_change=seen.append)
    assert client_cfg.url == "ws://x"
    assert client_cfg.max_reconnect_attempts == 2
    assert client_cfg.on_status_change is not None
    assert client_cfg.on_log is None


def test_camel_to_snake() -> None:
    assert camel_to_snake("maxReconnectDelayMs") == "max_reconnect_delay_ms"
    assert camel_to_snake("url") == "url"
