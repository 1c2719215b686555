"""Agent platform access: bearer tokens, HTTP transport and per-connection sessions."""

from .tokens import TokenManager
from .client import AgentApiClient
from .session import AgentSessionController

__all__ = ["AgentApiClient", "AgentSessionController", "TokenManager"]
