"""Process-wide bearer token state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TokenState:
    access_token: str | None = None
    expires_at: float | None = None
    refresh_in_flight: bool = False

    def is_fresh(self, now: float, buffer_s: float) -> bool:
        if not self.access_token or self.expires_at is None:
            return False
        return (self.expires_at - now) > buffer_s


__all__ = ["TokenState"]
