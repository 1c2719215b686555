"""Process-wide admission control for relay WebSocket connections."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Bound the number of live relay connections.

    Admission is keyed by the connection id so a rejected or finished
    connection can never release another connection's slot.
    """

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._lock = asyncio.Lock()
        self._active: set[str] = set()

    @property
    def max_connections(self) -> int:
        return self._max

    async def connect(self, connection_id: str) -> bool:
        """Reserve a slot (before the socket is accepted). False when at capacity."""
        async with self._lock:
            if len(self._active) >= self._max:
                logger.warning("connection %s refused: %d/%d slots in use", connection_id, len(self._active), self._max)
                return False
            self._active.add(connection_id)
            return True

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._active.discard(connection_id)

    def get_connection_count(self) -> int:
        return len(self._active)


__all__ = ["ConnectionManager"]
