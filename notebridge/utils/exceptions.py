"""
Exception hierarchy for notebridge.

Provides:
- Base exception with an error code and category
- Errors raised by request handlers and the action router
- describe_error(), the human-readable message sent back to remote callers
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFIG = "config"
    FATAL = "fatal"


class NoteBridgeError(Exception):
    """Base exception for all notebridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(NoteBridgeError):
    """Request payload validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class UnknownActionError(NoteBridgeError):
    """No handler is registered for the requested action."""

    def __init__(self, action: str):
        super().__init__(
            f"Unknown action: {action}",
            code="UNKNOWN_ACTION",
            category=ErrorCategory.NOT_FOUND,
            details={"action": action},
        )


class ConfigError(NoteBridgeError):
    """Configuration file could not be loaded."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="CONFIG_ERROR", category=ErrorCategory.CONFIG, details=details)


def describe_error(exc: BaseException) -> str:
    """Human-readable failure message for a handler exception.

    NoteBridgeError carries its own message (its str() adds the code prefix);
    other exceptions use str(), falling back to the class name when empty.
    """
    if isinstance(exc, NoteBridgeError):
        return exc.message
    text = str(exc)
    if text:
        return text
    return exc.__class__.__name__
