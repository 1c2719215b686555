"""Per-connection session state owned by one WebSocket handler."""

from __future__ import annotations

import uuid
from dataclasses import field, dataclass
from collections.abc import Callable

from .transcript import TranscriptAccumulator


@dataclass(slots=True)
class ConnectionSession:
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    recognition_active: bool = False
    is_recording: bool = False
    closed: bool = False
    turns_pending: int = 0
    transcript: TranscriptAccumulator = field(default_factory=TranscriptAccumulator)
    touch: Callable[[], None] | None = None

    @property
    def is_busy(self) -> bool:
        return self.is_recording or self.turns_pending > 0


__all__ = ["ConnectionSession"]
