"""Runtime dependency construction (HTTP client, token cache, speech clients, admission)."""

from __future__ import annotations

import logging

import httpx

from voice_relay.errors import AuthError
from voice_relay.state import RuntimeDeps
from voice_relay.relay.bridge import RelayBridge
from voice_relay.agent.tokens import TokenManager
from voice_relay.state.settings import AppSettings
from voice_relay.speech.synthesis import SpeechRenderer
from voice_relay.handlers.connections import ConnectionManager
from voice_relay.speech.google_stream import google_stream_factory

from .google import build_speech_clients
from .settings_loader import load_settings

logger = logging.getLogger(__name__)


async def probe_agent_token(tokens: TokenManager, settings: AppSettings) -> bool:
    """Try one token exchange at startup so misconfiguration shows up in the logs early."""
    if not settings.agent.has_credentials:
        logger.warning("agent platform credentials not configured; replies run in demo mode")
        return False
    try:
        await tokens.get_valid_token()
    except AuthError as exc:
        logger.error("agent platform authentication failed at startup: %s", exc)
        return False
    if not settings.agent.agent_id:
        logger.warning("agent id not configured; replies run in demo mode")
    return True


async def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    http = httpx.AsyncClient()
    tokens = TokenManager(http=http, settings=settings.agent)

    speech_client, tts_client = build_speech_clients(settings.speech)
    relay_bridge = RelayBridge(
        settings=settings,
        http=http,
        tokens=tokens,
        renderer=SpeechRenderer(client=tts_client, settings=settings.speech),
        open_stream=google_stream_factory(speech_client, settings.speech),
        closeables=(speech_client, tts_client),
    )

    connections = ConnectionManager(max_connections=settings.limits.max_concurrent_connections)

    return RuntimeDeps(
        settings=settings,
        http=http,
        tokens=tokens,
        connections=connections,
        relay_bridge=relay_bridge,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps", "probe_agent_token"]
