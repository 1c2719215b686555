"""Server-to-client JSON frames and a send helper that never raises."""

from __future__ import annotations

import base64
import logging
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from voice_relay.config.websocket import (
    WS_KEY_TYPE,
    WS_MSG_ERROR,
    WS_MSG_TRANSCRIPT,
    WS_MSG_AUDIO_RESPONSE,
    WS_MSG_CONVERSATION_RESET,
)

logger = logging.getLogger(__name__)


def build_transcript_frame(text: str, is_final: bool) -> dict[str, Any]:
    return {WS_KEY_TYPE: WS_MSG_TRANSCRIPT, "text": text, "isFinal": is_final}


def build_audio_response_frame(text: str, audio: bytes) -> dict[str, Any]:
    # Empty audio is legal: the client shows the text without playback.
    return {
        WS_KEY_TYPE: WS_MSG_AUDIO_RESPONSE,
        "audio": base64.b64encode(audio).decode("ascii"),
        "text": text,
    }


def build_conversation_reset_frame(message: str) -> dict[str, Any]:
    return {WS_KEY_TYPE: WS_MSG_CONVERSATION_RESET, "message": message}


def build_error_frame(message: str, *, code: str | None = None) -> dict[str, Any]:
    frame: dict[str, Any] = {WS_KEY_TYPE: WS_MSG_ERROR, "message": message}
    if code:
        frame["code"] = code
    return frame


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_json(ws: WebSocket, frame: dict[str, Any]) -> bool:
    return await safe_send_text(ws, orjson.dumps(frame).decode("utf-8"))


__all__ = [
    "build_audio_response_frame",
    "build_conversation_reset_frame",
    "build_error_frame",
    "build_transcript_frame",
    "safe_send_json",
    "safe_send_text",
]
