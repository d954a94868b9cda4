"""Utility functions for notebridge."""

from notebridge.utils.exceptions import (
    NoteBridgeError,
    ValidationError,
    UnknownActionError,
    ConfigError,
    ErrorCategory,
    describe_error,
)

__all__ = [
    "NoteBridgeError",
    "ValidationError",
    "UnknownActionError",
    "ConfigError",
    "ErrorCategory",
    "describe_error",
]
