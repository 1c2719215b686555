"""Browser voice relay: streaming speech recognition, a remote conversational agent and speech synthesis."""

__version__ = "0.1.0"

__all__ = ["__version__"]
