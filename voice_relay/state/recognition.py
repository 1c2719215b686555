"""Recognition stream lifecycle states."""

from __future__ import annotations

import enum


class RecognitionState(enum.Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    RESTARTING = "restarting"


__all__ = ["RecognitionState"]
