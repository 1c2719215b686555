"""Factory wiring shared process-wide collaborators into per-connection relays."""

from __future__ import annotations

import logging
import contextlib
from typing import Any

import httpx
from fastapi import WebSocket

from voice_relay.agent.tokens import TokenManager
from voice_relay.agent.client import AgentApiClient
from voice_relay.state.settings import AppSettings
from voice_relay.speech.synthesis import SpeechRenderer
from voice_relay.state.connection import ConnectionSession
from voice_relay.agent.session import AgentSessionController
from voice_relay.speech.stream import RecognitionStreamFactory

from .connection import RelayConnection

logger = logging.getLogger(__name__)


class RelayBridge:
    def __init__(
        self,
        *,
        settings: AppSettings,
        http: httpx.AsyncClient,
        tokens: TokenManager,
        renderer: SpeechRenderer,
        open_stream: RecognitionStreamFactory,
        closeables: tuple[Any, ...] = (),
    ) -> None:
        self._settings = settings
        self._tokens = tokens
        self._renderer = renderer
        self._open_stream = open_stream
        self._agent_client = AgentApiClient(http=http, settings=settings.agent)
        self._closeables = closeables

    @property
    def agent_enabled(self) -> bool:
        return self._settings.agent.is_configured

    def new_connection(self, ws: WebSocket, session: ConnectionSession) -> RelayConnection:
        agent = AgentSessionController(
            client=self._agent_client,
            tokens=self._tokens,
            settings=self._settings.agent,
        )
        return RelayConnection(
            ws=ws,
            session=session,
            agent=agent,
            renderer=self._renderer,
            open_stream=self._open_stream,
            agent_enabled=self.agent_enabled,
            restart_delay_s=self._settings.speech.restart_delay_s,
        )

    async def aclose(self) -> None:
        """Close provider clients (gRPC channels) owned by the bridge."""
        for client in self._closeables:
            transport = getattr(client, "transport", None)
            if transport is None:
                continue
            with contextlib.suppress(Exception):
                await transport.close()
        logger.debug("relay bridge closed")


__all__ = ["RelayBridge"]
