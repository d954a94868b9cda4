"""Configuration module for notebridge."""

from notebridge.config.loader import load_config, get_config_path
from notebridge.config.schema import BridgeConfig, Config, LoggingConfig

__all__ = ["BridgeConfig", "Config", "LoggingConfig", "load_config", "get_config_path"]
