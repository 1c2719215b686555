"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
import contextlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx

    from voice_relay.agent.tokens import TokenManager
    from voice_relay.relay.bridge import RelayBridge
    from voice_relay.state.settings import AppSettings
    from voice_relay.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    settings: AppSettings
    http: httpx.AsyncClient
    tokens: TokenManager
    connections: ConnectionManager
    relay_bridge: RelayBridge

    async def shutdown(self) -> None:
        with contextlib.suppress(Exception):
            await self.relay_bridge.aclose()
        try:
            await self.http.aclose()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
