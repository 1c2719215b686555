"""Transport-neutral shape of one streaming recognition session."""

from __future__ import annotations

from typing import Protocol
from collections.abc import Callable, AsyncIterator


class RecognitionStream(Protocol):
    """One provider-side streaming transcription session.

    `results()` yields `(text, is_final)` pairs until the provider ends the
    stream, and raises when the stream fails. `close()` half-closes the upload
    direction; pending results still arrive afterwards.
    """

    @property
    def closed(self) -> bool: ...

    async def write(self, chunk: bytes) -> None: ...

    def close(self) -> None: ...

    def results(self) -> AsyncIterator[tuple[str, bool]]: ...


RecognitionStreamFactory = Callable[[], RecognitionStream]


__all__ = ["RecognitionStream", "RecognitionStreamFactory"]
