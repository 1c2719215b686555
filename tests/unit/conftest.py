from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fakes import FakeAgentPlatform, build_agent_settings

from voice_relay.state.settings import AgentSettings


@pytest.fixture
def agent_settings() -> AgentSettings:
    return build_agent_settings()


@pytest.fixture
def platform() -> FakeAgentPlatform:
    return FakeAgentPlatform()


@pytest_asyncio.fixture
async def http(platform: FakeAgentPlatform) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(platform)) as client:
        yield client
