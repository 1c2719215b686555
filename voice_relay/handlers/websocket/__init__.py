"""Relay WebSocket endpoint: framing, dispatch and per-connection lifecycle."""

from .manager import handle_websocket_connection

__all__ = ["handle_websocket_connection"]
