"""Secrets and credential configuration (env names only)."""

from __future__ import annotations

ENV_AGENT_CLIENT_ID = "AGENT_CLIENT_ID"
ENV_AGENT_CLIENT_SECRET = "AGENT_CLIENT_SECRET"

LEGACY_ENV_AGENT_CLIENT_ID = "SALESFORCE_CLIENT_ID"
LEGACY_ENV_AGENT_CLIENT_SECRET = "SALESFORCE_CLIENT_SECRET"

# Service-account JSON document, for hosts where a credentials file is impractical.
ENV_GOOGLE_CREDENTIALS_JSON = "GOOGLE_APPLICATION_CREDENTIALS_JSON"

__all__ = [
    "ENV_AGENT_CLIENT_ID",
    "ENV_AGENT_CLIENT_SECRET",
    "ENV_GOOGLE_CREDENTIALS_JSON",
    "LEGACY_ENV_AGENT_CLIENT_ID",
    "LEGACY_ENV_AGENT_CLIENT_SECRET",
]
