"""WebSocket receive loop for one relay connection."""

from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from voice_relay.config.websocket import WS_KEY_TYPE
from voice_relay.relay.connection import RelayConnection

from .dispatch import HANDLERS
from .parser import parse_client_frame
from .lifecycle import WebSocketLifecycle

logger = logging.getLogger(__name__)


async def _receive_frame(ws: WebSocket) -> str | bytes | None:
    message = await ws.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000))
    return message.get("text") or message.get("bytes")


async def _recv_with_watchdog(ws: WebSocket, lifecycle: WebSocketLifecycle) -> tuple[str | bytes | None, bool]:
    try:
        frame = await asyncio.wait_for(_receive_frame(ws), timeout=lifecycle.watchdog_tick_s * 2)
        return frame, False
    except TimeoutError:
        return None, lifecycle.should_close()


async def run_message_loop(ws: WebSocket, lifecycle: WebSocketLifecycle, conn: RelayConnection) -> None:
    connection_id = conn.session.connection_id
    try:
        while True:
            raw, should_exit = await _recv_with_watchdog(ws, lifecycle)
            if should_exit:
                return
            if raw is None:
                continue

            lifecycle.touch()

            try:
                msg = parse_client_frame(raw)
            except ValueError as exc:
                logger.warning("[%s] ignoring malformed frame: %s", connection_id, exc)
                continue

            handler = HANDLERS.get(msg[WS_KEY_TYPE])
            if handler is None:
                logger.debug("[%s] ignoring frame of unknown type %r", connection_id, msg[WS_KEY_TYPE])
                continue
            await handler(ws, conn, msg)
    except WebSocketDisconnect:
        return


__all__ = ["run_message_loop"]
