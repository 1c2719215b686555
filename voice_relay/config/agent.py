"""Agent platform configuration (env names, defaults and fixed API constants)."""

from __future__ import annotations

ENV_AGENT_INSTANCE_URL = "AGENT_INSTANCE_URL"
ENV_AGENT_API_BASE_URL = "AGENT_API_BASE_URL"
ENV_AGENT_ID = "AGENT_ID"

# The original deployment used SALESFORCE_* names; they are still honoured as fallbacks.
LEGACY_ENV_AGENT_INSTANCE_URL = "SALESFORCE_INSTANCE_URL"
LEGACY_ENV_AGENT_ID = "SALESFORCE_AGENT_ID"

DEFAULT_AGENT_INSTANCE_URL = ""
DEFAULT_AGENT_API_BASE_URL = "https://api.salesforce.com/einstein/ai-agent/v1"

TOKEN_PATH = "/services/oauth2/token"
TOKEN_GRANT_TYPE = "client_credentials"

# Provider tokens live ~120 minutes; cache for less and refresh 5 minutes early.
TOKEN_CACHE_LIFETIME_S: float = 90 * 60
TOKEN_EXPIRY_BUFFER_S: float = 5 * 60
TOKEN_REQUEST_TIMEOUT_S: float = 30.0

AGENT_CALL_TIMEOUT_S: float = 30.0
AGENT_TEARDOWN_TIMEOUT_S: float = 10.0

# Each retry reason (expired token, expired session) is honoured at most once per message.
AGENT_MAX_RETRIES_PER_REASON = 1

AGENT_REPLY_MESSAGE_TYPE = "Inform"
AGENT_MESSAGE_TYPE = "Text"
AGENT_STREAMING_CHUNK_TYPES = ("Text",)
AGENT_SESSION_KEY_PREFIX = "session_"

AGENT_NO_REPLY_TEXT = "I received your message but couldn't generate a response."
AGENT_APOLOGY_TEXT = "I'm sorry, I'm having trouble right now. Could you try again?"
AGENT_DEMO_REPLY_TEMPLATE = (
    'I heard you say: "{utterance}". The voice interface is working perfectly, '
    "but the agent platform integration needs to be configured."
)
CONVERSATION_RESET_MESSAGE = "Conversation reset - starting fresh!"

__all__ = [
    "AGENT_APOLOGY_TEXT",
    "AGENT_CALL_TIMEOUT_S",
    "AGENT_DEMO_REPLY_TEMPLATE",
    "AGENT_MAX_RETRIES_PER_REASON",
    "AGENT_MESSAGE_TYPE",
    "AGENT_NO_REPLY_TEXT",
    "AGENT_REPLY_MESSAGE_TYPE",
    "AGENT_SESSION_KEY_PREFIX",
    "AGENT_STREAMING_CHUNK_TYPES",
    "AGENT_TEARDOWN_TIMEOUT_S",
    "CONVERSATION_RESET_MESSAGE",
    "DEFAULT_AGENT_API_BASE_URL",
    "DEFAULT_AGENT_INSTANCE_URL",
    "ENV_AGENT_API_BASE_URL",
    "ENV_AGENT_ID",
    "ENV_AGENT_INSTANCE_URL",
    "LEGACY_ENV_AGENT_ID",
    "LEGACY_ENV_AGENT_INSTANCE_URL",
    "TOKEN_CACHE_LIFETIME_S",
    "TOKEN_EXPIRY_BUFFER_S",
    "TOKEN_GRANT_TYPE",
    "TOKEN_PATH",
    "TOKEN_REQUEST_TIMEOUT_S",
]
