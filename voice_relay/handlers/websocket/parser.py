"""Client frame parsing for the relay protocol."""

from __future__ import annotations

from typing import Any

import orjson

from voice_relay.config.websocket import WS_KEY_TYPE


def parse_client_frame(raw: str | bytes) -> dict[str, Any]:
    """Decode one client frame. Raises ValueError when it is not a typed JSON object."""
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise ValueError("frame must be a JSON object")

    msg_type = msg.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise ValueError("frame missing non-empty 'type'")

    msg[WS_KEY_TYPE] = msg_type.strip()
    return msg


__all__ = ["parse_client_frame"]
