"""Runtime package.

Keep this module dependency-light: importing `voice_relay.runtime.*` in unit
tests should not construct Google clients or open network connections.
"""

__all__: list[str] = []
