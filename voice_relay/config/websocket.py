"""WebSocket protocol configuration and constants."""

from __future__ import annotations

# The browser client connects to the page origin, so the socket shares "/" with the static site.
ENV_WS_ENDPOINT_PATH = "WS_ENDPOINT_PATH"
WS_ENDPOINT_PATH = "/"

WS_KEY_TYPE = "type"

# Client -> server
WS_MSG_START = "start"
WS_MSG_AUDIO = "audio"
WS_MSG_STOP = "stop"
WS_MSG_RESET_CONVERSATION = "reset_conversation"

# Server -> client
WS_MSG_TRANSCRIPT = "transcript"
WS_MSG_AUDIO_RESPONSE = "audio_response"
WS_MSG_CONVERSATION_RESET = "conversation_reset"
WS_MSG_ERROR = "error"

# Close codes
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002

WS_CLOSE_IDLE_REASON = "idle timeout"

# Idle watchdog
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
DEFAULT_WS_IDLE_TIMEOUT_S = 600.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0

# Errors (only used when refusing a connection; malformed frames get no reply)
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"

__all__ = [
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "ENV_WS_ENDPOINT_PATH",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_ENDPOINT_PATH",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_KEY_TYPE",
    "WS_MSG_AUDIO",
    "WS_MSG_AUDIO_RESPONSE",
    "WS_MSG_CONVERSATION_RESET",
    "WS_MSG_ERROR",
    "WS_MSG_RESET_CONVERSATION",
    "WS_MSG_START",
    "WS_MSG_STOP",
    "WS_MSG_TRANSCRIPT",
]
