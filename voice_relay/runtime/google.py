"""Google Cloud speech client bootstrap."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from google.cloud import speech, texttospeech
from google.oauth2 import service_account

from voice_relay.state.settings import SpeechSettings
from voice_relay.config.secrets import ENV_GOOGLE_CREDENTIALS_JSON

logger = logging.getLogger(__name__)


def load_google_credentials(settings: SpeechSettings) -> service_account.Credentials | None:
    """Credentials from the inline JSON document, or None for default discovery."""
    raw = settings.google_credentials_json
    if not raw:
        return None
    try:
        info: Any = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"{ENV_GOOGLE_CREDENTIALS_JSON} is not valid JSON") from exc
    if not isinstance(info, dict):
        raise ValueError(f"{ENV_GOOGLE_CREDENTIALS_JSON} must be a JSON object")
    return service_account.Credentials.from_service_account_info(info)


def build_speech_clients(
    settings: SpeechSettings,
) -> tuple[speech.SpeechAsyncClient, texttospeech.TextToSpeechAsyncClient]:
    credentials = load_google_credentials(settings)
    if credentials is None:
        logger.info("Google speech clients: using application default credentials")
    else:
        logger.info("Google speech clients: using inline service account credentials")
    return (
        speech.SpeechAsyncClient(credentials=credentials),
        texttospeech.TextToSpeechAsyncClient(credentials=credentials),
    )


__all__ = ["build_speech_clients", "load_google_credentials"]
