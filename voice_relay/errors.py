"""Shared error types for the voice relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class RelayError(Exception):
    """Base for every error raised by the relay's collaborators."""

    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


@dataclass(slots=True, eq=False)
class AuthError(RelayError):
    """Client credentials are missing or the token endpoint rejected them."""


@dataclass(slots=True, eq=False)
class SessionCreateError(RelayError):
    """A remote agent session could not be created."""


@dataclass(slots=True, eq=False)
class SessionExpiredError(RelayError):
    """The remote side no longer knows the recorded agent session (HTTP 404)."""


@dataclass(slots=True, eq=False)
class AgentCallError(RelayError):
    """A message exchange failed after the retry budget was spent."""


@dataclass(slots=True, eq=False)
class AgentUnauthorizedError(AgentCallError):
    """The agent endpoint rejected the bearer token (HTTP 401)."""


@dataclass(slots=True, eq=False)
class RecognitionStreamError(RelayError):
    """The streaming transcription provider reported a fault."""


@dataclass(slots=True, eq=False)
class RenderError(RelayError):
    """Speech synthesis failed."""


__all__ = [
    "AgentCallError",
    "AgentUnauthorizedError",
    "AuthError",
    "RecognitionStreamError",
    "RelayError",
    "RenderError",
    "SessionCreateError",
    "SessionExpiredError",
]
