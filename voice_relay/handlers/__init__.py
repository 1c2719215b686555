"""FastAPI-facing handlers (admission control and the relay WebSocket)."""

__all__: list[str] = []
