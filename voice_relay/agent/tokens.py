"""Process-wide bearer token cache for the agent platform.

One `TokenManager` is built per process and shared by every connection. The
refresh path is the only cross-connection synchronization point: at most one
client-credentials exchange runs at a time, and callers arriving while it is in
flight await that same exchange instead of starting their own.
"""

from __future__ import annotations

import time
import asyncio
import logging
from collections.abc import Callable

import httpx

from voice_relay.errors import AuthError
from voice_relay.state.token_state import TokenState
from voice_relay.state.settings import AgentSettings
from voice_relay.config.agent import (
    TOKEN_PATH,
    TOKEN_GRANT_TYPE,
    TOKEN_EXPIRY_BUFFER_S,
    TOKEN_CACHE_LIFETIME_S,
    TOKEN_REQUEST_TIMEOUT_S,
)

logger = logging.getLogger(__name__)

TimeFn = Callable[[], float]


def _retrieve_refresh_result(task: asyncio.Task) -> None:
    # Every waiter may have been cancelled; retrieve the outcome so a failed refresh is not logged as unhandled.
    if not task.cancelled():
        task.exception()


class TokenManager:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        settings: AgentSettings,
        now_fn: TimeFn | None = None,
        cache_lifetime_s: float = TOKEN_CACHE_LIFETIME_S,
        expiry_buffer_s: float = TOKEN_EXPIRY_BUFFER_S,
    ) -> None:
        self._http = http
        self._settings = settings
        self._now = now_fn or time.time
        self._cache_lifetime_s = float(cache_lifetime_s)
        self._expiry_buffer_s = float(expiry_buffer_s)
        self._state = TokenState()
        self._refresh_task: asyncio.Task[str] | None = None

    @property
    def refresh_in_flight(self) -> bool:
        return self._state.refresh_in_flight

    def snapshot(self) -> TokenState:
        """Copy of the token state with the token value masked."""
        return TokenState(
            access_token="***" if self._state.access_token else None,
            expires_at=self._state.expires_at,
            refresh_in_flight=self._state.refresh_in_flight,
        )

    def invalidate(self) -> None:
        """Forget the cached token; the next `get_valid_token` call refreshes."""
        self._state.access_token = None
        self._state.expires_at = None

    async def get_valid_token(self) -> str:
        if self._state.is_fresh(self._now(), self._expiry_buffer_s):
            return self._state.access_token or ""

        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.create_task(self._refresh())
            task.add_done_callback(_retrieve_refresh_result)
            self._refresh_task = task
        else:
            logger.debug("token refresh already in flight; waiting for it")
        # Shielded so one caller's cancellation does not abort the refresh other callers wait on.
        return await asyncio.shield(task)

    async def _refresh(self) -> str:
        self._state.refresh_in_flight = True
        try:
            token = await self._request_token()
            self._state.access_token = token
            self._state.expires_at = self._now() + self._cache_lifetime_s
            logger.info("agent platform authentication successful")
            return token
        finally:
            self._state.refresh_in_flight = False
            self._refresh_task = None

    async def _request_token(self) -> str:
        settings = self._settings
        if not settings.has_credentials:
            raise AuthError("agent platform client credentials are not configured")

        url = f"{settings.instance_url}{TOKEN_PATH}"
        logger.debug("requesting access token from %s", url)
        try:
            response = await self._http.post(
                url,
                data={
                    "grant_type": TOKEN_GRANT_TYPE,
                    "client_id": settings.client_id,
                    "client_secret": settings.client_secret,
                },
                timeout=TOKEN_REQUEST_TIMEOUT_S,
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"token request failed: {exc}") from exc

        if response.status_code >= 400:
            raise AuthError("token endpoint rejected the client credentials", status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise AuthError("token endpoint returned a non-JSON body", status_code=response.status_code) from exc

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("token response did not include an access_token", status_code=response.status_code)
        return token


__all__ = ["TokenManager"]
