"""Refusal path for connections that cannot be admitted."""

from __future__ import annotations

import contextlib

from fastapi import WebSocket

from voice_relay.relay.frames import safe_send_json, build_error_frame


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    # Accept so the client sees a reason, then close.
    try:
        await ws.accept()
    except Exception:
        return
    await safe_send_json(ws, build_error_frame(message, code=error_code))
    with contextlib.suppress(Exception):
        await ws.close(code=close_code, reason=message)


__all__ = ["reject_connection"]
