"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AgentSettings:
    instance_url: str
    api_base_url: str
    client_id: str
    client_secret: str
    agent_id: str

    @property
    def has_credentials(self) -> bool:
        return bool(self.instance_url and self.client_id and self.client_secret)

    @property
    def is_configured(self) -> bool:
        return self.has_credentials and bool(self.agent_id)


@dataclass(frozen=True, slots=True)
class SpeechSettings:
    stt_language_code: str
    stt_encoding: str
    stt_sample_rate_hz: int
    stt_model: str
    tts_language_code: str
    tts_voice_gender: str
    tts_voice_name: str
    tts_audio_encoding: str
    tts_speaking_rate: float
    tts_pitch: float
    google_credentials_json: str
    restart_delay_s: float


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    endpoint_path: str
    idle_timeout_s: float
    watchdog_tick_s: float


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int
    static_dir: str
    log_level: str


@dataclass(frozen=True, slots=True)
class AppSettings:
    agent: AgentSettings
    speech: SpeechSettings
    websocket: WebSocketSettings
    limits: LimitsSettings
    server: ServerSettings


__all__ = [
    "AgentSettings",
    "AppSettings",
    "LimitsSettings",
    "ServerSettings",
    "SpeechSettings",
    "WebSocketSettings",
]
