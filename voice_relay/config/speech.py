"""Speech recognition and synthesis configuration (env names and defaults)."""

from __future__ import annotations

ENV_STT_LANGUAGE_CODE = "STT_LANGUAGE_CODE"
ENV_STT_ENCODING = "STT_ENCODING"
ENV_STT_SAMPLE_RATE_HZ = "STT_SAMPLE_RATE_HZ"
ENV_STT_MODEL = "STT_MODEL"

# Browser MediaRecorder emits Opus in a WebM container at 48kHz.
DEFAULT_STT_LANGUAGE_CODE = "en-GB"
DEFAULT_STT_ENCODING = "WEBM_OPUS"
DEFAULT_STT_SAMPLE_RATE_HZ = 48000
DEFAULT_STT_MODEL = "latest_long"

STT_INTERIM_RESULTS = True
STT_SINGLE_UTTERANCE = False
STT_AUTOMATIC_PUNCTUATION = True
STT_USE_ENHANCED = True

# Fixed delay before reopening a failed recognition stream. There is no attempt cap.
RECOGNITION_RESTART_DELAY_S: float = 1.0

# Synthesis is a single unary call; bound it so a hung call fails the turn instead of stalling it.
TTS_TIMEOUT_S: float = 20.0

ENV_TTS_LANGUAGE_CODE = "TTS_LANGUAGE_CODE"
ENV_TTS_VOICE_GENDER = "TTS_VOICE_GENDER"
ENV_TTS_VOICE_NAME = "TTS_VOICE_NAME"
ENV_TTS_AUDIO_ENCODING = "TTS_AUDIO_ENCODING"
ENV_TTS_SPEAKING_RATE = "TTS_SPEAKING_RATE"
ENV_TTS_PITCH = "TTS_PITCH"

DEFAULT_TTS_LANGUAGE_CODE = "en-GB"
DEFAULT_TTS_VOICE_GENDER = "FEMALE"
DEFAULT_TTS_VOICE_NAME = ""
DEFAULT_TTS_AUDIO_ENCODING = "MP3"
DEFAULT_TTS_SPEAKING_RATE = 1.0
DEFAULT_TTS_PITCH = 0.0

__all__ = [
    "DEFAULT_STT_ENCODING",
    "DEFAULT_STT_LANGUAGE_CODE",
    "DEFAULT_STT_MODEL",
    "DEFAULT_STT_SAMPLE_RATE_HZ",
    "DEFAULT_TTS_AUDIO_ENCODING",
    "DEFAULT_TTS_LANGUAGE_CODE",
    "DEFAULT_TTS_PITCH",
    "DEFAULT_TTS_SPEAKING_RATE",
    "DEFAULT_TTS_VOICE_GENDER",
    "DEFAULT_TTS_VOICE_NAME",
    "ENV_STT_ENCODING",
    "ENV_STT_LANGUAGE_CODE",
    "ENV_STT_MODEL",
    "ENV_STT_SAMPLE_RATE_HZ",
    "ENV_TTS_AUDIO_ENCODING",
    "ENV_TTS_LANGUAGE_CODE",
    "ENV_TTS_PITCH",
    "ENV_TTS_SPEAKING_RATE",
    "ENV_TTS_VOICE_GENDER",
    "ENV_TTS_VOICE_NAME",
    "RECOGNITION_RESTART_DELAY_S",
    "STT_AUTOMATIC_PUNCTUATION",
    "STT_INTERIM_RESULTS",
    "STT_SINGLE_UTTERANCE",
    "STT_USE_ENHANCED",
    "TTS_TIMEOUT_S",
]
