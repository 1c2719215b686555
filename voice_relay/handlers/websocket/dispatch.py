"""Handlers for each client frame type."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Awaitable

from fastapi import WebSocket

from voice_relay.relay.connection import RelayConnection
from voice_relay.config.websocket import WS_MSG_STOP, WS_MSG_AUDIO, WS_MSG_START, WS_MSG_RESET_CONVERSATION

logger = logging.getLogger(__name__)

HandlerFn = Callable[[WebSocket, RelayConnection, dict[str, Any]], Awaitable[None]]


async def _handle_start(_ws: WebSocket, conn: RelayConnection, _msg: dict[str, Any]) -> None:
    await conn.start_recording()


async def _handle_audio(_ws: WebSocket, conn: RelayConnection, msg: dict[str, Any]) -> None:
    audio = msg.get("audio")
    if not isinstance(audio, str) or not audio:
        logger.warning("[%s] audio frame without base64 'audio' field", conn.session.connection_id)
        return
    await conn.feed_audio(audio)


async def _handle_stop(_ws: WebSocket, conn: RelayConnection, _msg: dict[str, Any]) -> None:
    utterance = await conn.stop_recording()
    if utterance:
        conn.submit_utterance(utterance)


async def _handle_reset_conversation(_ws: WebSocket, conn: RelayConnection, _msg: dict[str, Any]) -> None:
    conn.submit_reset()


HANDLERS: dict[str, HandlerFn] = {
    WS_MSG_START: _handle_start,
    WS_MSG_AUDIO: _handle_audio,
    WS_MSG_STOP: _handle_stop,
    WS_MSG_RESET_CONVERSATION: _handle_reset_conversation,
}


__all__ = ["HANDLERS", "HandlerFn"]
