"""Environment parsing for runtime settings."""

from __future__ import annotations

import os

from voice_relay.config.limits import ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS
from voice_relay.config.logging import ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from voice_relay.config.server import (
    ENV_HOST,
    ENV_PORT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    ENV_STATIC_DIR,
    DEFAULT_STATIC_DIR,
)
from voice_relay.config.secrets import (
    ENV_AGENT_CLIENT_ID,
    ENV_AGENT_CLIENT_SECRET,
    LEGACY_ENV_AGENT_CLIENT_ID,
    ENV_GOOGLE_CREDENTIALS_JSON,
    LEGACY_ENV_AGENT_CLIENT_SECRET,
)
from voice_relay.state.settings import (
    AppSettings,
    AgentSettings,
    LimitsSettings,
    ServerSettings,
    SpeechSettings,
    WebSocketSettings,
)
from voice_relay.config.websocket import (
    WS_ENDPOINT_PATH,
    ENV_WS_ENDPOINT_PATH,
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
)
from voice_relay.config.agent import (
    ENV_AGENT_ID,
    LEGACY_ENV_AGENT_ID,
    ENV_AGENT_API_BASE_URL,
    ENV_AGENT_INSTANCE_URL,
    DEFAULT_AGENT_API_BASE_URL,
    DEFAULT_AGENT_INSTANCE_URL,
    LEGACY_ENV_AGENT_INSTANCE_URL,
)
from voice_relay.config.speech import (
    ENV_STT_MODEL,
    ENV_TTS_PITCH,
    ENV_STT_ENCODING,
    DEFAULT_STT_MODEL,
    DEFAULT_TTS_PITCH,
    ENV_TTS_VOICE_NAME,
    DEFAULT_STT_ENCODING,
    ENV_STT_LANGUAGE_CODE,
    ENV_TTS_LANGUAGE_CODE,
    ENV_TTS_SPEAKING_RATE,
    ENV_TTS_VOICE_GENDER,
    DEFAULT_TTS_VOICE_NAME,
    ENV_STT_SAMPLE_RATE_HZ,
    ENV_TTS_AUDIO_ENCODING,
    DEFAULT_STT_LANGUAGE_CODE,
    DEFAULT_TTS_LANGUAGE_CODE,
    DEFAULT_TTS_SPEAKING_RATE,
    DEFAULT_TTS_VOICE_GENDER,
    DEFAULT_STT_SAMPLE_RATE_HZ,
    DEFAULT_TTS_AUDIO_ENCODING,
    RECOGNITION_RESTART_DELAY_S,
)


def _str_env(name: str, default: str, *, fallback_name: str | None = None) -> str:
    raw = os.getenv(name)
    if (raw is None or not raw.strip()) and fallback_name is not None:
        raw = os.getenv(fallback_name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _normalize_path(path: str) -> str:
    path = path.strip() or WS_ENDPOINT_PATH
    return path if path.startswith("/") else f"/{path}"


def _load_agent_settings() -> AgentSettings:
    instance_url = _str_env(
        ENV_AGENT_INSTANCE_URL,
        DEFAULT_AGENT_INSTANCE_URL,
        fallback_name=LEGACY_ENV_AGENT_INSTANCE_URL,
    )
    return AgentSettings(
        instance_url=instance_url.rstrip("/"),
        api_base_url=_str_env(ENV_AGENT_API_BASE_URL, DEFAULT_AGENT_API_BASE_URL).rstrip("/"),
        client_id=_str_env(ENV_AGENT_CLIENT_ID, "", fallback_name=LEGACY_ENV_AGENT_CLIENT_ID),
        client_secret=_str_env(ENV_AGENT_CLIENT_SECRET, "", fallback_name=LEGACY_ENV_AGENT_CLIENT_SECRET),
        agent_id=_str_env(ENV_AGENT_ID, "", fallback_name=LEGACY_ENV_AGENT_ID),
    )


def _load_speech_settings() -> SpeechSettings:
    return SpeechSettings(
        stt_language_code=_str_env(ENV_STT_LANGUAGE_CODE, DEFAULT_STT_LANGUAGE_CODE),
        stt_encoding=_str_env(ENV_STT_ENCODING, DEFAULT_STT_ENCODING).upper(),
        stt_sample_rate_hz=max(8000, _int_env(ENV_STT_SAMPLE_RATE_HZ, DEFAULT_STT_SAMPLE_RATE_HZ)),
        stt_model=_str_env(ENV_STT_MODEL, DEFAULT_STT_MODEL),
        tts_language_code=_str_env(ENV_TTS_LANGUAGE_CODE, DEFAULT_TTS_LANGUAGE_CODE),
        tts_voice_gender=_str_env(ENV_TTS_VOICE_GENDER, DEFAULT_TTS_VOICE_GENDER).upper(),
        tts_voice_name=_str_env(ENV_TTS_VOICE_NAME, DEFAULT_TTS_VOICE_NAME),
        tts_audio_encoding=_str_env(ENV_TTS_AUDIO_ENCODING, DEFAULT_TTS_AUDIO_ENCODING).upper(),
        tts_speaking_rate=_float_env(ENV_TTS_SPEAKING_RATE, DEFAULT_TTS_SPEAKING_RATE),
        tts_pitch=_float_env(ENV_TTS_PITCH, DEFAULT_TTS_PITCH),
        google_credentials_json=(os.getenv(ENV_GOOGLE_CREDENTIALS_JSON) or "").strip(),
        restart_delay_s=RECOGNITION_RESTART_DELAY_S,
    )


def _load_websocket_settings() -> WebSocketSettings:
    idle_timeout = _float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S)
    watchdog_tick = _float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S)
    if watchdog_tick <= 0:
        watchdog_tick = DEFAULT_WS_WATCHDOG_TICK_S

    return WebSocketSettings(
        endpoint_path=_normalize_path(_str_env(ENV_WS_ENDPOINT_PATH, WS_ENDPOINT_PATH)),
        idle_timeout_s=max(0.0, idle_timeout),
        watchdog_tick_s=watchdog_tick,
    )


def _load_limits_settings() -> LimitsSettings:
    max_connections = _int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS)
    return LimitsSettings(max_concurrent_connections=max(1, max_connections))


def _load_server_settings() -> ServerSettings:
    return ServerSettings(
        host=_str_env(ENV_HOST, DEFAULT_HOST),
        port=_int_env(ENV_PORT, DEFAULT_PORT),
        static_dir=_str_env(ENV_STATIC_DIR, DEFAULT_STATIC_DIR),
        log_level=_str_env(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        agent=_load_agent_settings(),
        speech=_load_speech_settings(),
        websocket=_load_websocket_settings(),
        limits=_load_limits_settings(),
        server=_load_server_settings(),
    )


__all__ = ["load_settings"]
