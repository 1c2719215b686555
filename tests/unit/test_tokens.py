from __future__ import annotations

import gc
import asyncio
from urllib.parse import parse_qs

import httpx
import pytest
from fakes import INSTANCE_URL, build_agent_settings

from voice_relay.errors import AuthError
from voice_relay.agent.tokens import TokenManager


class _Clock:
    def __init__(self) -> None:
        self.t = 1_000.0

    def __call__(self) -> float:
        return self.t


class _TokenEndpoint:
    def __init__(self, *, status: int = 200) -> None:
        self.status = status
        self.requests: list[httpx.Request] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "invalid_client"})
        return httpx.Response(200, json={"access_token": f"tok-{len(self.requests)}", "token_type": "Bearer"})


def _manager(endpoint: _TokenEndpoint, clock: _Clock, **overrides) -> tuple[TokenManager, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
    manager = TokenManager(http=http, settings=build_agent_settings(**overrides), now_fn=clock)
    return manager, http


@pytest.mark.asyncio
async def test_token_is_fetched_once_and_cached() -> None:
    endpoint = _TokenEndpoint()
    clock = _Clock()
    manager, http = _manager(endpoint, clock)
    async with http:
        assert await manager.get_valid_token() == "tok-1"
        clock.t += 60 * 60
        assert await manager.get_valid_token() == "tok-1"

    assert len(endpoint.requests) == 1
    request = endpoint.requests[0]
    assert str(request.url) == f"{INSTANCE_URL}/services/oauth2/token"
    form = parse_qs(request.content.decode())
    assert form == {
        "grant_type": ["client_credentials"],
        "client_id": ["client-id"],
        "client_secret": ["client-secret"],
    }


@pytest.mark.asyncio
async def test_token_refreshes_inside_expiry_buffer() -> None:
    endpoint = _TokenEndpoint()
    clock = _Clock()
    manager, http = _manager(endpoint, clock)
    async with http:
        assert await manager.get_valid_token() == "tok-1"
        # 90 minute lifetime minus the 5 minute buffer.
        clock.t += 85 * 60
        assert await manager.get_valid_token() == "tok-2"

    assert len(endpoint.requests) == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh() -> None:
    endpoint = _TokenEndpoint()
    endpoint.gate = asyncio.Event()
    manager, http = _manager(endpoint, _Clock())
    async with http:
        callers = [asyncio.create_task(manager.get_valid_token()) for _ in range(5)]
        for _ in range(10):
            await asyncio.sleep(0)
        assert manager.refresh_in_flight is True

        endpoint.gate.set()
        tokens = await asyncio.gather(*callers)

    assert tokens == ["tok-1"] * 5
    assert len(endpoint.requests) == 1
    assert manager.refresh_in_flight is False


@pytest.mark.asyncio
async def test_failed_refresh_clears_in_flight_flag() -> None:
    endpoint = _TokenEndpoint(status=401)
    manager, http = _manager(endpoint, _Clock())
    async with http:
        with pytest.raises(AuthError) as exc:
            await manager.get_valid_token()
        assert exc.value.status_code == 401
        assert manager.refresh_in_flight is False

        endpoint.status = 200
        assert await manager.get_valid_token() == "tok-2"


@pytest.mark.asyncio
async def test_failed_refresh_with_no_remaining_waiters_is_not_reported() -> None:
    endpoint = _TokenEndpoint(status=401)
    endpoint.gate = asyncio.Event()
    manager, http = _manager(endpoint, _Clock())
    loop = asyncio.get_running_loop()
    reported: list[dict] = []
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: reported.append(context))
    try:
        async with http:
            waiter = asyncio.create_task(manager.get_valid_token())
            for _ in range(10):
                await asyncio.sleep(0)
            assert manager.refresh_in_flight is True
            waiter.cancel()
            results = await asyncio.gather(waiter, return_exceptions=True)
            assert isinstance(results[0], asyncio.CancelledError)

            endpoint.gate.set()
            for _ in range(50):
                if not manager.refresh_in_flight:
                    break
                await asyncio.sleep(0)
            assert manager.refresh_in_flight is False
            await asyncio.sleep(0)

        gc.collect()
    finally:
        loop.set_exception_handler(previous_handler)

    assert [c for c in reported if "never retrieved" in str(c.get("message", ""))] == []


@pytest.mark.asyncio
async def test_missing_credentials_fail_without_a_request() -> None:
    endpoint = _TokenEndpoint()
    manager, http = _manager(endpoint, _Clock(), client_secret="")
    async with http:
        with pytest.raises(AuthError):
            await manager.get_valid_token()

    assert endpoint.requests == []
    assert manager.refresh_in_flight is False


@pytest.mark.asyncio
async def test_response_without_access_token_is_rejected() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "Bearer"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        manager = TokenManager(http=http, settings=build_agent_settings())
        with pytest.raises(AuthError):
            await manager.get_valid_token()


@pytest.mark.asyncio
async def test_invalidate_forces_refresh_and_snapshot_masks_token() -> None:
    endpoint = _TokenEndpoint()
    clock = _Clock()
    manager, http = _manager(endpoint, clock)
    async with http:
        await manager.get_valid_token()
        snapshot = manager.snapshot()
        assert snapshot.access_token == "***"
        assert snapshot.expires_at == clock.t + 90 * 60

        manager.invalidate()
        assert manager.snapshot().access_token is None
        assert await manager.get_valid_token() == "tok-2"
