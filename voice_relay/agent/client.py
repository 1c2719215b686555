"""HTTP transport for the session-oriented agent messaging API."""

from __future__ import annotations

import uuid
import logging
from typing import Any

import httpx

from voice_relay.state.agent import AgentSession
from voice_relay.state.settings import AgentSettings
from voice_relay.errors import AgentCallError, SessionCreateError, SessionExpiredError, AgentUnauthorizedError
from voice_relay.config.agent import (
    AGENT_MESSAGE_TYPE,
    AGENT_CALL_TIMEOUT_S,
    AGENT_SESSION_KEY_PREFIX,
    AGENT_TEARDOWN_TIMEOUT_S,
    AGENT_STREAMING_CHUNK_TYPES,
)

logger = logging.getLogger(__name__)


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class AgentApiClient:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        settings: AgentSettings,
        call_timeout_s: float = AGENT_CALL_TIMEOUT_S,
        teardown_timeout_s: float = AGENT_TEARDOWN_TIMEOUT_S,
    ) -> None:
        self._http = http
        self._settings = settings
        self._call_timeout_s = float(call_timeout_s)
        self._teardown_timeout_s = float(teardown_timeout_s)

    def sessions_url(self) -> str:
        return f"{self._settings.api_base_url}/agents/{self._settings.agent_id}/sessions"

    def session_url(self, session_id: str) -> str:
        return f"{self._settings.api_base_url}/sessions/{session_id}"

    async def create_session(self, token: str) -> AgentSession:
        url = self.sessions_url()
        logger.debug("creating agent session via %s", url)
        payload = {
            "externalSessionKey": f"{AGENT_SESSION_KEY_PREFIX}{uuid.uuid4().hex}",
            "instanceConfig": {"endpoint": self._settings.instance_url},
            "streamingCapabilities": {"chunkTypes": list(AGENT_STREAMING_CHUNK_TYPES)},
            "bypassUser": True,
        }
        try:
            response = await self._http.post(
                url,
                json=payload,
                headers=_auth_headers(token),
                timeout=self._call_timeout_s,
            )
        except httpx.HTTPError as exc:
            raise SessionCreateError(f"agent session request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error("agent session creation rejected: status=%s body=%s", response.status_code, response.text)
            raise SessionCreateError("agent platform rejected session creation", status_code=response.status_code)

        body = _json_body(response)
        session_id = body.get("sessionId")
        messages_url = ((body.get("_links") or {}).get("messages") or {}).get("href")
        if not isinstance(session_id, str) or not session_id or not isinstance(messages_url, str) or not messages_url:
            raise SessionCreateError(
                "session response is missing sessionId or messages link",
                status_code=response.status_code,
            )

        greeting = body.get("messages") or []
        if greeting and isinstance(greeting[0], dict):
            logger.debug("agent greeting available: %s", greeting[0].get("message"))
        return AgentSession(session_id=session_id, messages_url=messages_url)

    async def post_message(self, session: AgentSession, token: str, text: str) -> list[dict[str, Any]]:
        """Post one user message at the session's current sequence number.

        Returns the typed messages of the reply. 401 and 404 are raised as their
        own error types so the caller can pick a retry path.
        """
        payload = {
            "message": {
                "sequenceId": session.sequence_id,
                "type": AGENT_MESSAGE_TYPE,
                "text": text,
            },
            "variables": [],
        }
        try:
            response = await self._http.post(
                session.messages_url,
                json=payload,
                headers={**_auth_headers(token), "Accept": "application/json"},
                timeout=self._call_timeout_s,
            )
        except httpx.HTTPError as exc:
            raise AgentCallError(f"agent message request failed: {exc}") from exc

        status = response.status_code
        if status == 401:
            raise AgentUnauthorizedError("agent platform rejected the access token", status_code=status)
        if status == 404:
            raise SessionExpiredError(f"agent session {session.session_id} not found", status_code=status)
        if status >= 400:
            logger.error("agent message rejected: status=%s reason=%s", status, response.reason_phrase)
            raise AgentCallError("agent platform rejected the message", status_code=status)

        messages = _json_body(response).get("messages") or []
        return [m for m in messages if isinstance(m, dict)]

    async def delete_session(self, session_id: str, token: str) -> None:
        try:
            response = await self._http.delete(
                self.session_url(session_id),
                headers=_auth_headers(token),
                timeout=self._teardown_timeout_s,
            )
        except httpx.HTTPError as exc:
            raise AgentCallError(f"agent session teardown failed: {exc}") from exc
        if response.status_code >= 400:
            raise AgentCallError("agent platform rejected session teardown", status_code=response.status_code)


__all__ = ["AgentApiClient"]
