"""Per-connection WebSocket lifecycle helpers (idle enforcement)."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable

from voice_relay.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
)

logger = logging.getLogger(__name__)


class WebSocketLifecycle:
    """Close the socket after `idle_timeout_s` without client activity.

    A connection that is recording or has agent work queued counts as busy and
    is never reaped. An idle timeout of 0 disables the watchdog check.
    """

    def __init__(
        self,
        websocket: Any,
        *,
        is_busy_fn: Callable[[], bool] | None = None,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._ws = websocket
        self._is_busy_fn = is_busy_fn or (lambda: False)
        self._idle_timeout_s = float(DEFAULT_WS_IDLE_TIMEOUT_S if idle_timeout_s is None else idle_timeout_s)
        self._watchdog_tick_s = float(DEFAULT_WS_WATCHDOG_TICK_S if watchdog_tick_s is None else watchdog_tick_s)
        self._clock = clock or time.monotonic
        self._last_activity = self._clock()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def watchdog_tick_s(self) -> float:
        return self._watchdog_tick_s

    def touch(self) -> None:
        self._last_activity = self._clock()

    def should_close(self) -> bool:
        return self._stop_event.is_set()

    def is_idle_expired(self) -> bool:
        if self._idle_timeout_s <= 0 or self._is_busy_fn():
            return False
        return (self._clock() - self._last_activity) >= self._idle_timeout_s

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                if self.is_idle_expired():
                    logger.info("WebSocket idle timeout reached; closing connection")
                    self._stop_event.set()
                    with contextlib.suppress(Exception):
                        await self._ws.close(code=WS_CLOSE_IDLE_CODE, reason=WS_CLOSE_IDLE_REASON)
                    break
        except asyncio.CancelledError:
            return
        except Exception:
            logger.debug("idle watchdog exiting due to unexpected error", exc_info=True)


__all__ = ["WebSocketLifecycle"]
