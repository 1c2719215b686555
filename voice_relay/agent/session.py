"""Lifecycle of the remote conversational-agent session bound to one connection."""

from __future__ import annotations

import logging
from typing import Any

from voice_relay.agent.tokens import TokenManager
from voice_relay.state.settings import AgentSettings
from voice_relay.state.agent import AgentSession, AgentSessionState
from voice_relay.config.agent import AGENT_NO_REPLY_TEXT, AGENT_REPLY_MESSAGE_TYPE, AGENT_MAX_RETRIES_PER_REASON
from voice_relay.errors import (
    AuthError,
    RelayError,
    AgentCallError,
    SessionCreateError,
    SessionExpiredError,
    AgentUnauthorizedError,
)

from .client import AgentApiClient

logger = logging.getLogger(__name__)

_RETRY_UNAUTHORIZED = "unauthorized"
_RETRY_EXPIRED = "expired"


def extract_reply(messages: list[dict[str, Any]]) -> str:
    for message in messages:
        if message.get("type") != AGENT_REPLY_MESSAGE_TYPE:
            continue
        text = message.get("message")
        if isinstance(text, str) and text:
            return text
        break
    return AGENT_NO_REPLY_TEXT


class AgentSessionController:
    """Own at most one live agent session and exchange messages through it.

    Messages carry strictly increasing sequence numbers starting at 1. The
    caller must not issue a second `send_message` before the previous one has
    resolved.
    """

    def __init__(self, *, client: AgentApiClient, tokens: TokenManager, settings: AgentSettings) -> None:
        self._client = client
        self._tokens = tokens
        self._settings = settings
        self._session: AgentSession | None = None
        self._state = AgentSessionState.NO_SESSION

    @property
    def session(self) -> AgentSession | None:
        return self._session

    @property
    def state(self) -> AgentSessionState:
        return self._state

    async def ensure_session(self) -> AgentSession:
        if self._session is not None and self._state is AgentSessionState.ACTIVE:
            return self._session
        if not self._settings.is_configured:
            raise SessionCreateError("agent platform credentials or agent id are not configured")

        self._state = AgentSessionState.CREATING
        try:
            try:
                token = await self._tokens.get_valid_token()
            except AuthError as exc:
                raise SessionCreateError(f"cannot authenticate: {exc.message}", status_code=exc.status_code) from exc
            session = await self._client.create_session(token)
        except BaseException:
            self._state = AgentSessionState.NO_SESSION
            raise

        self._session = session
        self._state = AgentSessionState.ACTIVE
        logger.debug("agent session created: %s messages_url=%s", session.session_id, session.messages_url)
        return session

    async def send_message(self, text: str) -> str:
        retries: dict[str, int] = {}
        while True:
            try:
                session = await self.ensure_session()
                try:
                    token = await self._tokens.get_valid_token()
                except AuthError as exc:
                    raise AgentCallError(f"cannot authenticate: {exc.message}", status_code=exc.status_code) from exc
                messages = await self._client.post_message(session, token, text)
            except SessionCreateError as exc:
                if exc.status_code == 401 and self._take_retry(retries, _RETRY_UNAUTHORIZED):
                    logger.info("access token rejected during session creation; refreshing")
                    self._tokens.invalidate()
                    continue
                raise AgentCallError(f"cannot open agent session: {exc.message}", status_code=exc.status_code) from exc
            except AgentUnauthorizedError as exc:
                if self._take_retry(retries, _RETRY_UNAUTHORIZED):
                    logger.info("access token rejected; refreshing and retrying once")
                    self._tokens.invalidate()
                    continue
                raise AgentCallError("access token rejected again after refresh", status_code=exc.status_code) from exc
            except SessionExpiredError as exc:
                if self._take_retry(retries, _RETRY_EXPIRED):
                    logger.info("agent session expired; recreating and retrying once")
                    await self.end_session()
                    continue
                raise AgentCallError("agent session expired again after recreation", status_code=exc.status_code) from exc

            session.commit_sequence_id()
            reply = extract_reply(messages)
            logger.info("agent: %s", reply)
            return reply

    async def reset_session(self) -> AgentSession:
        await self.end_session()
        return await self.ensure_session()

    async def end_session(self) -> None:
        session = self._session
        if session is None:
            return

        self._state = AgentSessionState.ENDING
        try:
            token = await self._tokens.get_valid_token()
            await self._client.delete_session(session.session_id, token)
            logger.debug("agent session ended: %s", session.session_id)
        except RelayError as exc:
            logger.warning("failed to end agent session %s: %s", session.session_id, exc)
        finally:
            self._session = None
            self._state = AgentSessionState.NO_SESSION

    @staticmethod
    def _take_retry(retries: dict[str, int], reason: str) -> bool:
        used = retries.get(reason, 0)
        if used >= AGENT_MAX_RETRIES_PER_REASON:
            return False
        retries[reason] = used + 1
        return True


__all__ = ["AgentSessionController", "extract_reply"]
