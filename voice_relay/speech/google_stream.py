"""Google Cloud Speech-to-Text streaming session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from google.cloud import speech
from google.api_core.exceptions import GoogleAPIError

from voice_relay.errors import RecognitionStreamError
from voice_relay.state.settings import SpeechSettings
from voice_relay.config.speech import (
    STT_USE_ENHANCED,
    STT_INTERIM_RESULTS,
    STT_SINGLE_UTTERANCE,
    STT_AUTOMATIC_PUNCTUATION,
)

from .stream import RecognitionStreamFactory

logger = logging.getLogger(__name__)


def build_streaming_config(settings: SpeechSettings) -> speech.StreamingRecognitionConfig:
    try:
        encoding = speech.RecognitionConfig.AudioEncoding[settings.stt_encoding]
    except KeyError as exc:
        raise ValueError(f"unsupported STT encoding: {settings.stt_encoding!r}") from exc

    config = speech.RecognitionConfig(
        encoding=encoding,
        sample_rate_hertz=settings.stt_sample_rate_hz,
        language_code=settings.stt_language_code,
        enable_automatic_punctuation=STT_AUTOMATIC_PUNCTUATION,
        model=settings.stt_model,
        use_enhanced=STT_USE_ENHANCED,
    )
    return speech.StreamingRecognitionConfig(
        config=config,
        interim_results=STT_INTERIM_RESULTS,
        single_utterance=STT_SINGLE_UTTERANCE,
    )


class GoogleRecognitionStream:
    """Bridge a bidirectional `streaming_recognize` call to queue-fed writes.

    The RPC is opened lazily by the first iteration of `results()`; audio
    written before that is buffered in the queue.
    """

    def __init__(self, *, client: speech.SpeechAsyncClient, config: speech.StreamingRecognitionConfig) -> None:
        self._client = client
        self._config = config
        self._audio: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, chunk: bytes) -> None:
        if self._closed:
            raise RecognitionStreamError("recognition stream is already closed")
        self._audio.put_nowait(chunk)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # None marks end of audio for the request generator.
        self._audio.put_nowait(None)

    async def _requests(self) -> AsyncIterator[speech.StreamingRecognizeRequest]:
        yield speech.StreamingRecognizeRequest(streaming_config=self._config)
        while True:
            chunk = await self._audio.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    async def results(self) -> AsyncIterator[tuple[str, bool]]:
        try:
            logger.debug("opening speech recognition stream")
            responses = await self._client.streaming_recognize(requests=self._requests())
            async for response in responses:
                if not response.results:
                    continue
                # Only the leading result is stable enough to surface.
                result = response.results[0]
                if not result.alternatives:
                    continue
                text = result.alternatives[0].transcript
                if text:
                    yield text, bool(result.is_final)
        except GoogleAPIError as exc:
            raise RecognitionStreamError(f"speech recognition failed: {exc}") from exc
        finally:
            self.close()


def google_stream_factory(client: speech.SpeechAsyncClient, settings: SpeechSettings) -> RecognitionStreamFactory:
    config = build_streaming_config(settings)

    def _open() -> GoogleRecognitionStream:
        return GoogleRecognitionStream(client=client, config=config)

    return _open


__all__ = ["GoogleRecognitionStream", "build_streaming_config", "google_stream_factory"]
