from __future__ import annotations

import asyncio

import pytest
from fakes import FakeWebSocket

from voice_relay.handlers.websocket.lifecycle import WebSocketLifecycle
from voice_relay.config.websocket import WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON


@pytest.mark.asyncio
async def test_websocket_lifecycle_closes_when_idle() -> None:
    ws = FakeWebSocket()
    lifecycle = WebSocketLifecycle(ws, idle_timeout_s=0.05, watchdog_tick_s=0.01)
    lifecycle.start()

    await asyncio.wait_for(ws.closed.wait(), timeout=1.0)
    assert ws.close_code == WS_CLOSE_IDLE_CODE
    assert ws.close_reason == WS_CLOSE_IDLE_REASON
    assert lifecycle.should_close() is True

    await lifecycle.stop()


@pytest.mark.asyncio
async def test_websocket_lifecycle_spares_busy_connections() -> None:
    ws = FakeWebSocket()
    lifecycle = WebSocketLifecycle(ws, is_busy_fn=lambda: True, idle_timeout_s=0.02, watchdog_tick_s=0.01)
    lifecycle.start()

    await asyncio.sleep(0.1)
    assert not ws.closed.is_set()

    await lifecycle.stop()


def test_idle_expiry_follows_clock_and_touch() -> None:
    now = [0.0]
    lifecycle = WebSocketLifecycle(FakeWebSocket(), idle_timeout_s=10.0, clock=lambda: now[0])

    now[0] = 9.0
    assert lifecycle.is_idle_expired() is False
    lifecycle.touch()
    now[0] = 18.0
    assert lifecycle.is_idle_expired() is False
    now[0] = 19.0
    assert lifecycle.is_idle_expired() is True


def test_zero_idle_timeout_disables_expiry() -> None:
    now = [0.0]
    lifecycle = WebSocketLifecycle(FakeWebSocket(), idle_timeout_s=0.0, clock=lambda: now[0])
    now[0] = 1e9
    assert lifecycle.is_idle_expired() is False
