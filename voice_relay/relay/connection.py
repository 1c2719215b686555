"""Per-connection orchestrator: audio in, transcript out, agent turn, spoken reply.

Recording control (start/audio/stop) is handled inline so frames keep flowing
while a turn is in progress. Agent work (turns and conversation resets) runs on
a per-connection FIFO so sequence numbers stay strictly ordered.
"""

from __future__ import annotations

import base64
import asyncio
import binascii
import logging
from typing import Any
from collections.abc import Callable, Awaitable

from fastapi import WebSocket

from voice_relay.errors import RelayError
from voice_relay.speech.synthesis import SpeechRenderer
from voice_relay.state.connection import ConnectionSession
from voice_relay.agent.session import AgentSessionController
from voice_relay.speech.stream import RecognitionStreamFactory
from voice_relay.config.speech import RECOGNITION_RESTART_DELAY_S
from voice_relay.speech.recognition import RecognitionSessionController
from voice_relay.config.agent import AGENT_APOLOGY_TEXT, AGENT_DEMO_REPLY_TEMPLATE, CONVERSATION_RESET_MESSAGE

from .frames import (
    safe_send_json,
    build_transcript_frame,
    build_audio_response_frame,
    build_conversation_reset_frame,
)

logger = logging.getLogger(__name__)


class RelayConnection:
    def __init__(
        self,
        *,
        ws: WebSocket,
        session: ConnectionSession,
        agent: AgentSessionController,
        renderer: SpeechRenderer,
        open_stream: RecognitionStreamFactory,
        agent_enabled: bool = True,
        restart_delay_s: float = RECOGNITION_RESTART_DELAY_S,
    ) -> None:
        self._ws = ws
        self._session = session
        self._agent = agent
        self._renderer = renderer
        self._agent_enabled = agent_enabled
        self._recognition = RecognitionSessionController(
            session=session,
            open_stream=open_stream,
            on_result=self._on_transcript,
            restart_delay_s=restart_delay_s,
        )
        self._agent_lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()

    @property
    def session(self) -> ConnectionSession:
        return self._session

    @property
    def recognition(self) -> RecognitionSessionController:
        return self._recognition

    @property
    def agent(self) -> AgentSessionController:
        return self._agent

    async def start_recording(self) -> None:
        self._session.transcript.reset()
        self._session.is_recording = True
        await self._recognition.start()
        logger.debug("[%s] recording started", self._session.connection_id)

    async def feed_audio(self, audio_b64: str) -> bool:
        if not self._session.recognition_active:
            return False
        try:
            chunk = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("[%s] dropping audio frame with invalid base64", self._session.connection_id)
            return False
        if not chunk:
            return False
        return await self._recognition.feed_audio(chunk)

    async def stop_recording(self) -> str:
        """Stop capture and return the resolved utterance ("" when nothing was heard)."""
        self._session.is_recording = False
        # Resolve before suspending so late results cannot mix into this utterance.
        utterance = self._session.transcript.take_utterance()
        await self._recognition.stop()
        if utterance:
            logger.info("[%s] user: %s", self._session.connection_id, utterance)
        else:
            logger.debug("[%s] recording stopped without a transcript", self._session.connection_id)
        return utterance

    def submit_utterance(self, utterance: str) -> asyncio.Task:
        return self._enqueue(self.process_utterance, utterance)

    def submit_reset(self) -> asyncio.Task:
        return self._enqueue(self.reset_conversation)

    async def process_utterance(self, utterance: str) -> None:
        """Run one full turn. Always ends in exactly one audio_response frame."""
        try:
            reply = await self._agent_reply(utterance)
            audio = await self._renderer.render(reply)
        except Exception as exc:
            logger.error("[%s] error processing utterance: %s", self._session.connection_id, exc)
            await self._send_apology()
            return
        await safe_send_json(self._ws, build_audio_response_frame(reply, audio))

    async def reset_conversation(self) -> None:
        if self._agent_enabled:
            try:
                await self._agent.reset_session()
                logger.info("[%s] conversation reset", self._session.connection_id)
            except RelayError as exc:
                # The next turn recreates the session lazily.
                logger.error("[%s] conversation reset failed to open a new session: %s", self._session.connection_id, exc)
        await safe_send_json(self._ws, build_conversation_reset_frame(CONVERSATION_RESET_MESSAGE))

    async def close(self) -> None:
        self._session.closed = True
        self._session.is_recording = False
        try:
            await self._recognition.close()
            pending = list(self._pending)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        finally:
            await self._agent.end_session()

    async def _agent_reply(self, utterance: str) -> str:
        if not self._agent_enabled:
            return AGENT_DEMO_REPLY_TEMPLATE.format(utterance=utterance)
        return await self._agent.send_message(utterance)

    async def _send_apology(self) -> None:
        text = AGENT_APOLOGY_TEXT
        try:
            audio = await self._renderer.render(text)
        except Exception as exc:
            logger.error("[%s] apology rendering failed, sending text only: %s", self._session.connection_id, exc)
            audio = b""
        await safe_send_json(self._ws, build_audio_response_frame(text, audio))

    async def _on_transcript(self, text: str, is_final: bool) -> None:
        logger.debug('[%s] speech data: "%s" (final=%s)', self._session.connection_id, text, is_final)
        self._session.transcript.add_fragment(text, is_final)
        await safe_send_json(self._ws, build_transcript_frame(text, is_final))

    def _enqueue(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        self._session.turns_pending += 1
        task = asyncio.create_task(self._run_serialized(fn, *args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_serialized(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> None:
        try:
            async with self._agent_lock:
                if self._session.closed:
                    return
                await fn(*args)
        except Exception:
            logger.exception("[%s] agent work failed", self._session.connection_id)
        finally:
            self._session.turns_pending -= 1
            if self._session.touch is not None:
                self._session.touch()


__all__ = ["RelayConnection"]
