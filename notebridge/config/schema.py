"""Configuration schema using Pydantic.

Single data model and defaults for the bridge, read from ~/.notebridge/config.json.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

from notebridge.bridge.types import ClientConfig, LogObserver, StatusObserver


class BridgeConfig(BaseModel):
    """Bridge connection configuration."""
    url: str = "ws://127.0.0.1:3002"
    max_reconnect_attempts: int | None = Field(default=None, ge=0)  # None means retry forever
    initial_reconnect_delay_ms: float = Field(default=1000.0, ge=0)
    max_reconnect_delay_ms: float = Field(default=30000.0, ge=0)

    @model_validator(mode="after")
    def _check_delays(self) -> "BridgeConfig":
        if self.max_reconnect_delay_ms < self.initial_reconnect_delay_ms:
            raise ValueError("maxReconnectDelayMs must be >= initialReconnectDelayMs")
        return self

    def to_client_config(
        self,
        *,
        on_status_change: StatusObserver | None = None,
        on_log: LogObserver | None = None,
    ) -> ClientConfig:
        return ClientConfig(
            url=self.url,
            max_reconnect_attempts=self.max_reconnect_attempts,
            initial_reconnect_delay_ms=self.initial_reconnect_delay_ms,
            max_reconnect_delay_ms=self.max_reconnect_delay_ms,
            on_status_change=on_status_change,
            on_log=on_log,
        )


class LoggingConfig(BaseModel):
    """Log sink configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: bool = True  # Rotating file under ~/.notebridge/logs


class Config(BaseSettings):
    """Root configuration for notebridge."""
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        env_prefix="NOTEBRIDGE_",
        env_nested_delimiter="__"
    )
