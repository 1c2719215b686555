"""Admission control configuration (env names and defaults)."""

from __future__ import annotations

ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"

DEFAULT_MAX_CONCURRENT_CONNECTIONS = 100

__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "ENV_MAX_CONCURRENT_CONNECTIONS",
]
