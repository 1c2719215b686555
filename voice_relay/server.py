"""Main FastAPI server for the voice relay."""

from __future__ import annotations

import logging
from typing import Any
from pathlib import Path
from datetime import UTC, datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.staticfiles import StaticFiles
from fastapi.responses import ORJSONResponse

from voice_relay.runtime.logging import configure_logging
from voice_relay.runtime.settings_loader import load_settings
from voice_relay.handlers.websocket.manager import handle_websocket_connection
from voice_relay.runtime.dependencies import probe_agent_token, build_runtime_deps

logger = logging.getLogger(__name__)

settings = load_settings()

configure_logging(settings.server.log_level)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    runtime_deps = await build_runtime_deps(settings)
    app.state.runtime_deps = runtime_deps
    await probe_agent_token(runtime_deps.tokens, settings)
    logger.info(
        "runtime: ready on %s:%s (ws path %s, agent %s)",
        settings.server.host,
        settings.server.port,
        settings.websocket.endpoint_path,
        "configured" if settings.agent.is_configured else "demo mode",
    )
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


def _iso_timestamp(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=UTC).isoformat()


@app.get("/health")
async def health(request: Request) -> dict[str, Any]:
    deps = getattr(request.app.state, "runtime_deps", None)
    if deps is None:
        return {"status": "starting"}
    token = deps.tokens.snapshot()
    return {
        "status": "ok",
        "agent_configured": deps.settings.agent.is_configured,
        "has_access_token": token.access_token is not None,
        "token_expires_at": _iso_timestamp(token.expires_at),
        "active_connections": deps.connections.get_connection_count(),
    }


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.websocket(settings.websocket.endpoint_path)
async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)


# Mounted last so the routes above win over the catch-all static handler.
_static_dir = Path(settings.server.static_dir)
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
else:
    logger.debug("static directory %s not found; serving API only", _static_dir)
