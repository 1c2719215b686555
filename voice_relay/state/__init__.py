from .runtime import RuntimeDeps
from .settings import AppSettings
from .token_state import TokenState
from .agent import AgentSession, AgentSessionState
from .connection import ConnectionSession
from .transcript import TranscriptAccumulator
from .recognition import RecognitionState

__all__ = [
    "AgentSession",
    "AgentSessionState",
    "AppSettings",
    "ConnectionSession",
    "RecognitionState",
    "RuntimeDeps",
    "TokenState",
    "TranscriptAccumulator",
]
