from __future__ import annotations

import asyncio

import pytest
from fakes import StreamFactory, drain

from voice_relay.state.recognition import RecognitionState
from voice_relay.state.connection import ConnectionSession
from voice_relay.speech.recognition import RecognitionSessionController


class _Harness:
    def __init__(self, *, restart_delay_s: float = 0.01) -> None:
        self.session = ConnectionSession(is_recording=True)
        self.factory = StreamFactory()
        self.results: list[tuple[str, bool]] = []
        self.controller = RecognitionSessionController(
            session=self.session,
            open_stream=self.factory,
            on_result=self._on_result,
            restart_delay_s=restart_delay_s,
        )

    async def _on_result(self, text: str, is_final: bool) -> None:
        self.results.append((text, is_final))


@pytest.mark.asyncio
async def test_start_opens_stream_and_forwards_audio() -> None:
    h = _Harness()
    await h.controller.start()

    assert h.controller.state is RecognitionState.STREAMING
    assert h.session.recognition_active is True
    assert await h.controller.feed_audio(b"chunk") is True
    assert h.factory.current.written == [b"chunk"]

    await h.controller.close()


@pytest.mark.asyncio
async def test_results_reach_callback_only_while_recording() -> None:
    h = _Harness()
    await h.controller.start()

    h.factory.current.emit("hello", False)
    await drain()
    h.session.is_recording = False
    h.factory.current.emit("ignored", True)
    await drain()

    assert h.results == [("hello", False)]
    await h.controller.close()


@pytest.mark.asyncio
async def test_stop_half_closes_and_is_idempotent() -> None:
    h = _Harness()
    await h.controller.start()
    stream = h.factory.current

    await h.controller.stop()
    await h.controller.stop()

    assert stream.closed is True
    assert h.controller.state is RecognitionState.IDLE
    assert h.session.recognition_active is False
    assert await h.controller.feed_audio(b"late") is False

    # Results still draining from the half-closed stream are stale.
    stream.emit("late result", True)
    await drain()
    assert h.results == []

    await h.controller.close()


@pytest.mark.asyncio
async def test_provider_error_restarts_after_delay() -> None:
    h = _Harness(restart_delay_s=0.02)
    await h.controller.start()

    h.factory.current.fail(RuntimeError("stream reset"))
    await drain()

    assert h.controller.state is RecognitionState.RESTARTING
    assert h.session.recognition_active is False
    assert await h.controller.feed_audio(b"dropped") is False

    await asyncio.sleep(0.1)

    assert h.controller.state is RecognitionState.STREAMING
    assert len(h.factory.streams) == 2
    assert await h.controller.feed_audio(b"resumed") is True
    assert h.factory.streams[1].written == [b"resumed"]
    assert h.factory.streams[0].written == []

    h.factory.current.emit("after restart", True)
    await drain()
    assert h.results == [("after restart", True)]

    await h.controller.close()


@pytest.mark.asyncio
async def test_unexpected_end_of_stream_restarts() -> None:
    h = _Harness()
    await h.controller.start()

    h.factory.current.finish()
    await asyncio.sleep(0.1)

    assert h.controller.state is RecognitionState.STREAMING
    assert len(h.factory.streams) == 2
    await h.controller.close()


@pytest.mark.asyncio
async def test_stop_during_restart_cancels_pending_reopen() -> None:
    h = _Harness(restart_delay_s=0.05)
    await h.controller.start()
    h.factory.current.fail(RuntimeError("boom"))
    await drain()
    assert h.controller.state is RecognitionState.RESTARTING

    await h.controller.stop()
    await asyncio.sleep(0.1)

    assert h.controller.state is RecognitionState.IDLE
    assert len(h.factory.streams) == 1
    await h.controller.close()


@pytest.mark.asyncio
async def test_no_restart_after_connection_closed() -> None:
    h = _Harness()
    await h.controller.start()
    h.session.closed = True

    h.factory.current.fail(RuntimeError("boom"))
    await asyncio.sleep(0.05)

    assert len(h.factory.streams) == 1
    await h.controller.close()


@pytest.mark.asyncio
async def test_restart_replaces_stream_and_ignores_old_results() -> None:
    h = _Harness()
    await h.controller.start()
    first = h.factory.current
    await h.controller.start()

    first.emit("stale", True)
    h.factory.current.emit("fresh", True)
    await drain()

    assert first.closed is True
    assert h.results == [("fresh", True)]
    await h.controller.close()
