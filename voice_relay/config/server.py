"""HTTP server configuration (env names and defaults)."""

from __future__ import annotations

ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_STATIC_DIR = "STATIC_DIR"

DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 3000
DEFAULT_STATIC_DIR = "public"

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_STATIC_DIR",
    "ENV_HOST",
    "ENV_PORT",
    "ENV_STATIC_DIR",
]
