"""Configuration module exports (env names, defaults and protocol constants only)."""

from .limits import DEFAULT_MAX_CONCURRENT_CONNECTIONS
from .websocket import WS_ENDPOINT_PATH

__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "WS_ENDPOINT_PATH",
]
