from __future__ import annotations

import json
import base64
import asyncio
from typing import Any

import httpx
import pytest
from fakes import FakeRenderer, StreamFactory, FakeWebSocket, drain, build_agent_settings

from voice_relay.state import RuntimeDeps
from voice_relay.relay.bridge import RelayBridge
from voice_relay.agent.tokens import TokenManager
from voice_relay.state.connection import ConnectionSession
from voice_relay.handlers.connections import ConnectionManager
from voice_relay.handlers.websocket.lifecycle import WebSocketLifecycle
from voice_relay.handlers.websocket.message_loop import run_message_loop
from voice_relay.handlers.websocket.manager import handle_websocket_connection
from voice_relay.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY
from voice_relay.state.settings import (
    AppSettings,
    LimitsSettings,
    ServerSettings,
    SpeechSettings,
    WebSocketSettings,
)


class _ScriptedWebSocket(FakeWebSocket):
    def __init__(self, frames: list[dict[str, Any] | str], *, hold_open: bool = False) -> None:
        super().__init__()
        self._incoming: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        for frame in frames:
            self.push(frame)
        if not hold_open:
            self.hang_up()

    def push(self, frame: dict[str, Any] | str) -> None:
        text = frame if isinstance(frame, str) else json.dumps(frame)
        self._incoming.put_nowait({"type": "websocket.receive", "text": text})

    def hang_up(self) -> None:
        self._incoming.put_nowait({"type": "websocket.disconnect", "code": 1000})

    async def receive(self) -> dict[str, Any]:
        return await self._incoming.get()


def _settings(*, agent_id: str = "", max_connections: int = 4) -> AppSettings:
    return AppSettings(
        agent=build_agent_settings(agent_id=agent_id),
        speech=SpeechSettings(
            stt_language_code="en-GB",
            stt_encoding="WEBM_OPUS",
            stt_sample_rate_hz=48000,
            stt_model="latest_long",
            tts_language_code="en-GB",
            tts_voice_gender="FEMALE",
            tts_voice_name="",
            tts_audio_encoding="MP3",
            tts_speaking_rate=1.0,
            tts_pitch=0.0,
            google_credentials_json="",
            restart_delay_s=0.01,
        ),
        websocket=WebSocketSettings(endpoint_path="/", idle_timeout_s=0.0, watchdog_tick_s=0.01),
        limits=LimitsSettings(max_concurrent_connections=max_connections),
        server=ServerSettings(host="127.0.0.1", port=3000, static_dir="public", log_level="terse"),
    )


def _runtime(http: httpx.AsyncClient, settings: AppSettings, factory: StreamFactory) -> RuntimeDeps:
    tokens = TokenManager(http=http, settings=settings.agent)
    return RuntimeDeps(
        settings=settings,
        http=http,
        tokens=tokens,
        connections=ConnectionManager(max_connections=settings.limits.max_concurrent_connections),
        relay_bridge=RelayBridge(
            settings=settings,
            http=http,
            tokens=tokens,
            renderer=FakeRenderer(),
            open_stream=factory,
        ),
    )


@pytest.mark.asyncio
async def test_message_loop_ignores_malformed_and_unknown_frames(http: httpx.AsyncClient) -> None:
    factory = StreamFactory()
    deps = _runtime(http, _settings(), factory)
    ws = _ScriptedWebSocket(
        [
            "not json",
            {"no": "type"},
            {"type": "mystery"},
            {"type": "audio"},
            {"type": "start"},
            {"type": "audio", "audio": base64.b64encode(b"opus").decode("ascii")},
        ]
    )
    conn = deps.relay_bridge.new_connection(ws, ConnectionSession())
    lifecycle = WebSocketLifecycle(ws, idle_timeout_s=0.0, watchdog_tick_s=0.01)

    await asyncio.wait_for(run_message_loop(ws, lifecycle, conn), timeout=1.0)

    assert len(factory.streams) == 1
    assert factory.current.written == [b"opus"]
    assert ws.sent == []
    await conn.close()


@pytest.mark.asyncio
async def test_spoken_turn_through_dispatch_yields_one_audio_response(http: httpx.AsyncClient) -> None:
    factory = StreamFactory()
    deps = _runtime(http, _settings(), factory)
    ws = _ScriptedWebSocket([{"type": "start"}], hold_open=True)
    conn = deps.relay_bridge.new_connection(ws, ConnectionSession())
    lifecycle = WebSocketLifecycle(ws, idle_timeout_s=0.0, watchdog_tick_s=0.01)
    loop_task = asyncio.create_task(run_message_loop(ws, lifecycle, conn))

    for _ in range(100):
        if factory.streams:
            break
        await asyncio.sleep(0.001)
    factory.current.emit("book a table", True)
    await drain()
    ws.push({"type": "stop"})
    for _ in range(100):
        if ws.frames("audio_response"):
            break
        await asyncio.sleep(0.001)
    ws.hang_up()
    await asyncio.wait_for(loop_task, timeout=1.0)
    await drain()

    assert [f["text"] for f in ws.frames("transcript")] == ["book a table"]
    (response,) = ws.frames("audio_response")
    assert "book a table" in response["text"]
    assert base64.b64decode(response["audio"]) == f"mp3:{response['text']}".encode()
    assert conn.session.turns_pending == 0
    await conn.close()


@pytest.mark.asyncio
async def test_connection_over_capacity_is_refused(http: httpx.AsyncClient) -> None:
    deps = _runtime(http, _settings(max_connections=1), StreamFactory())
    assert await deps.connections.connect("someone-else") is True
    ws = _ScriptedWebSocket([])

    await handle_websocket_connection(ws, deps)

    assert ws.accepted is True
    assert ws.close_code == WS_CLOSE_BUSY_CODE
    (error,) = ws.frames("error")
    assert error["code"] == WS_ERROR_SERVER_AT_CAPACITY
    assert deps.connections.get_connection_count() == 1


@pytest.mark.asyncio
async def test_connection_slot_released_after_disconnect(http: httpx.AsyncClient) -> None:
    factory = StreamFactory()
    deps = _runtime(http, _settings(), factory)
    ws = _ScriptedWebSocket([{"type": "start"}, {"type": "stop"}])

    await asyncio.wait_for(handle_websocket_connection(ws, deps), timeout=1.0)

    assert ws.accepted is True
    assert deps.connections.get_connection_count() == 0
    assert factory.streams[0].closed is True


@pytest.mark.asyncio
async def test_connection_manager_caps_admissions() -> None:
    manager = ConnectionManager(max_connections=2)

    assert await manager.connect("a") is True
    assert await manager.connect("b") is True
    assert await manager.connect("c") is False
    await manager.disconnect("a")
    assert await manager.connect("c") is True
    assert manager.get_connection_count() == 2
