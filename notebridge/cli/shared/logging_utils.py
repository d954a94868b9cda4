"""Loguru helpers for consistent console and file logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from notebridge.config.loader import get_data_dir

_SINK_IDS: dict[str, int] = {}


def configure_console_logging(level: str = "INFO") -> None:
    """Replace loguru's default stderr sink with one at ``level``."""
    if "console" in _SINK_IDS:
        logger.remove(_SINK_IDS.pop("console"))
    else:
        logger.remove()
    _SINK_IDS["console"] = logger.add(sys.stderr, level=level)


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_dir = get_data_dir() / "logs"
    log_path = log_dir / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_dir.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path
