"""Logging configuration."""

from __future__ import annotations

import logging

ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_SHOW_THIRD_PARTY_LOGS = "SHOW_THIRD_PARTY_LOGS"

DEFAULT_LOG_LEVEL = "verbose"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# "verbose" surfaces per-fragment and per-request detail; "terse" keeps turn-level milestones.
LOG_LEVEL_ALIASES: dict[str, int] = {
    "verbose": logging.DEBUG,
    "terse": logging.INFO,
}

THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "google", "grpc", "urllib3")

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "ENV_LOG_LEVEL",
    "ENV_SHOW_THIRD_PARTY_LOGS",
    "LOG_FORMAT",
    "LOG_LEVEL_ALIASES",
    "THIRD_PARTY_LOGGERS",
]
