"""Logging initialization."""

from __future__ import annotations

import os
import logging

from voice_relay.config.logging import (
    LOG_FORMAT,
    ENV_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ALIASES,
    THIRD_PARTY_LOGGERS,
    ENV_SHOW_THIRD_PARTY_LOGS,
)


def resolve_log_level(raw: str | None) -> int:
    name = (raw or DEFAULT_LOG_LEVEL).strip().lower()
    if name in LOG_LEVEL_ALIASES:
        return LOG_LEVEL_ALIASES[name]
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger; `level` wins over the LOG_LEVEL environment variable."""
    # HTTP and gRPC clients log every request at DEBUG; keep them quiet under "verbose".
    if (os.getenv(ENV_SHOW_THIRD_PARTY_LOGS) or "").strip().lower() not in {"1", "true", "yes"}:
        for name in THIRD_PARTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    logging.basicConfig(level=resolve_log_level(level or os.getenv(ENV_LOG_LEVEL)), format=LOG_FORMAT)


__all__ = ["configure_logging", "resolve_log_level"]
