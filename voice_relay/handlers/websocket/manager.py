"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from voice_relay.state.runtime import RuntimeDeps
from voice_relay.relay.connection import RelayConnection
from voice_relay.state.connection import ConnectionSession
from voice_relay.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .errors import reject_connection
from .lifecycle import WebSocketLifecycle
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps, session: ConnectionSession) -> bool:
    if not await runtime_deps.connections.connect(session.connection_id):
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return False

    try:
        await ws.accept()
    except Exception:
        with contextlib.suppress(Exception):
            await runtime_deps.connections.disconnect(session.connection_id)
        raise
    return True


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    session = ConnectionSession()
    lifecycle: WebSocketLifecycle | None = None
    conn: RelayConnection | None = None
    admitted = False
    try:
        if not await _prepare_connection(ws, runtime_deps, session):
            return
        admitted = True

        lifecycle = WebSocketLifecycle(
            ws,
            is_busy_fn=lambda: session.is_busy,
            idle_timeout_s=runtime_deps.settings.websocket.idle_timeout_s,
            watchdog_tick_s=runtime_deps.settings.websocket.watchdog_tick_s,
        )
        session.touch = lifecycle.touch
        lifecycle.start()

        conn = runtime_deps.relay_bridge.new_connection(ws, session)

        logger.info(
            "client connected id=%s. Active: %s",
            session.connection_id,
            runtime_deps.connections.get_connection_count(),
        )
        await run_message_loop(ws, lifecycle, conn)
    finally:
        if lifecycle is not None:
            with contextlib.suppress(Exception):
                await lifecycle.stop()

        if conn is not None:
            try:
                await conn.close()
            except Exception:
                logger.exception("[%s] connection cleanup failed", session.connection_id)

        if admitted:
            with contextlib.suppress(Exception):
                await runtime_deps.connections.disconnect(session.connection_id)
            logger.info(
                "client disconnected id=%s. Active: %s",
                session.connection_id,
                runtime_deps.connections.get_connection_count(),
            )


__all__ = ["handle_websocket_connection"]
