"""Remote agent session binding for one connection."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class AgentSessionState(enum.Enum):
    NO_SESSION = "no_session"
    CREATING = "creating"
    ACTIVE = "active"
    ENDING = "ending"


@dataclass(slots=True)
class AgentSession:
    session_id: str
    messages_url: str
    sequence_id: int = 1

    def commit_sequence_id(self) -> None:
        # Only called once the remote has accepted the message carrying the current number.
        self.sequence_id += 1


__all__ = ["AgentSession", "AgentSessionState"]
