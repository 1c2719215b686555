"""Text-to-speech rendering via Google Cloud Text-to-Speech."""

from __future__ import annotations

import logging

from google.cloud import texttospeech
from google.api_core.exceptions import GoogleAPIError

from voice_relay.errors import RenderError
from voice_relay.config.speech import TTS_TIMEOUT_S
from voice_relay.state.settings import SpeechSettings

logger = logging.getLogger(__name__)


class SpeechRenderer:
    """Render reply text to an encoded audio payload (MP3 by default)."""

    def __init__(
        self,
        *,
        client: texttospeech.TextToSpeechAsyncClient,
        settings: SpeechSettings,
        timeout_s: float = TTS_TIMEOUT_S,
    ) -> None:
        try:
            gender = texttospeech.SsmlVoiceGender[settings.tts_voice_gender]
        except KeyError as exc:
            raise ValueError(f"unsupported TTS voice gender: {settings.tts_voice_gender!r}") from exc
        try:
            encoding = texttospeech.AudioEncoding[settings.tts_audio_encoding]
        except KeyError as exc:
            raise ValueError(f"unsupported TTS audio encoding: {settings.tts_audio_encoding!r}") from exc

        self._client = client
        self._timeout_s = timeout_s
        self._voice = texttospeech.VoiceSelectionParams(
            language_code=settings.tts_language_code,
            ssml_gender=gender,
            name=settings.tts_voice_name,
        )
        self._audio_config = texttospeech.AudioConfig(
            audio_encoding=encoding,
            speaking_rate=settings.tts_speaking_rate,
            pitch=settings.tts_pitch,
        )

    async def render(self, text: str) -> bytes:
        request = texttospeech.SynthesizeSpeechRequest(
            input=texttospeech.SynthesisInput(text=text),
            voice=self._voice,
            audio_config=self._audio_config,
        )
        try:
            response = await self._client.synthesize_speech(request=request, timeout=self._timeout_s)
        except GoogleAPIError as exc:
            raise RenderError(f"speech synthesis failed: {exc}") from exc

        audio = bytes(response.audio_content)
        logger.debug("synthesized %d bytes of audio for %d characters", len(audio), len(text))
        return audio


__all__ = ["SpeechRenderer"]
