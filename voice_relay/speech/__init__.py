"""Speech recognition (streaming) and synthesis."""

from .stream import RecognitionStream, RecognitionStreamFactory
from .recognition import RecognitionSessionController

__all__ = ["RecognitionSessionController", "RecognitionStream", "RecognitionStreamFactory"]
