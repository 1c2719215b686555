"""Per-connection relay between the browser socket, speech services and the agent."""

from .bridge import RelayBridge
from .connection import RelayConnection

__all__ = ["RelayBridge", "RelayConnection"]
