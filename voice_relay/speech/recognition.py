"""Recognition session controller: one live provider stream per connection.

State machine:

    IDLE --start--> STREAMING --stop--> IDLE
    STREAMING --provider error--> RESTARTING --delay--> STREAMING
    RESTARTING --stop--> IDLE

Restarts are unbounded while the connection stays open. Results from a stream
that is no longer current, or that arrive while the connection is not
recording, are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Awaitable

from voice_relay.state.recognition import RecognitionState
from voice_relay.state.connection import ConnectionSession
from voice_relay.config.speech import RECOGNITION_RESTART_DELAY_S

from .stream import RecognitionStream, RecognitionStreamFactory

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str, bool], Awaitable[None]]


class RecognitionSessionController:
    def __init__(
        self,
        *,
        session: ConnectionSession,
        open_stream: RecognitionStreamFactory,
        on_result: ResultCallback,
        restart_delay_s: float = RECOGNITION_RESTART_DELAY_S,
    ) -> None:
        self._session = session
        self._open_stream_fn = open_stream
        self._on_result = on_result
        self._restart_delay_s = max(0.0, float(restart_delay_s))
        self._state = RecognitionState.IDLE
        self._stream: RecognitionStream | None = None
        self._reader: asyncio.Task | None = None
        self._restart: asyncio.Task | None = None
        # Readers of half-closed streams still draining their last results.
        self._retired: set[asyncio.Task] = set()

    @property
    def state(self) -> RecognitionState:
        return self._state

    async def start(self) -> None:
        """Open a fresh stream, replacing any existing one."""
        self._cancel_restart()
        if self._stream is not None:
            self._close_stream()
        self._open_stream()

    async def feed_audio(self, chunk: bytes) -> bool:
        """Forward one audio chunk. Returns False when the chunk was dropped."""
        stream = self._stream
        if self._state is not RecognitionState.STREAMING or stream is None or stream.closed:
            return False
        try:
            await stream.write(chunk)
        except Exception as exc:
            logger.error("error writing to speech recognition stream: %s", exc)
            if stream is self._stream:
                self._handle_stream_failure()
            return False
        return True

    async def stop(self) -> None:
        """Half-close the current stream (or cancel a pending restart). Idempotent."""
        if self._state is RecognitionState.RESTARTING:
            self._cancel_restart()
            self._state = RecognitionState.IDLE
            return
        if self._state is not RecognitionState.STREAMING:
            return
        self._close_stream()
        self._state = RecognitionState.IDLE

    async def close(self) -> None:
        await self.stop()
        self._cancel_restart()
        tasks = list(self._retired)
        if self._reader is not None:
            tasks.append(self._reader)
            self._reader = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._retired.clear()

    def _open_stream(self) -> None:
        stream = self._open_stream_fn()
        self._stream = stream
        self._state = RecognitionState.STREAMING
        self._session.recognition_active = True
        self._reader = asyncio.create_task(self._read(stream))
        logger.debug("speech recognition started")

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        self._session.recognition_active = False
        if stream is not None:
            stream.close()
        reader = self._reader
        self._reader = None
        if reader is not None and not reader.done():
            self._retired.add(reader)

    def _handle_stream_failure(self) -> None:
        self._close_stream()
        self._state = RecognitionState.RESTARTING
        if self._session.closed:
            return
        self._restart = asyncio.create_task(self._restart_after_delay())

    def _cancel_restart(self) -> None:
        if self._restart is not None:
            self._restart.cancel()
            self._restart = None

    async def _restart_after_delay(self) -> None:
        await asyncio.sleep(self._restart_delay_s)
        self._restart = None
        if self._state is not RecognitionState.RESTARTING or self._session.closed:
            return
        logger.info("restarting speech recognition")
        self._open_stream()

    async def _read(self, stream: RecognitionStream) -> None:
        try:
            async for text, is_final in stream.results():
                if stream is not self._stream:
                    continue
                if not self._session.is_recording:
                    logger.debug("dropping transcript received while not recording")
                    continue
                await self._on_result(text, is_final)
            if stream is self._stream:
                logger.warning("speech recognition stream ended unexpectedly")
                self._handle_stream_failure()
        except asyncio.CancelledError:
            return
        except Exception as exc:
            if stream is self._stream:
                logger.error("speech recognition error: %s", exc)
                self._handle_stream_failure()
            else:
                logger.debug("retired recognition stream ended with error", exc_info=True)
        finally:
            task = asyncio.current_task()
            if task is not None:
                self._retired.discard(task)


__all__ = ["RecognitionSessionController", "ResultCallback"]
