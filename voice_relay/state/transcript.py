"""Accumulation of streaming transcription fragments into one utterance."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TranscriptAccumulator:
    """Merge interim/final fragments for one recording.

    Final fragments are space-joined in arrival order. Only the most recent
    interim fragment is kept, and any final fragment discards it. At stop time
    the accumulated finals win; the last interim is a best-effort fallback.
    """

    accumulated_transcript: str = ""
    last_interim_fragment: str = ""

    def reset(self) -> None:
        self.accumulated_transcript = ""
        self.last_interim_fragment = ""

    def add_fragment(self, text: str, is_final: bool) -> None:
        if not is_final:
            self.last_interim_fragment = text
            return
        if self.accumulated_transcript:
            self.accumulated_transcript = f"{self.accumulated_transcript} {text}"
        else:
            self.accumulated_transcript = text
        self.last_interim_fragment = ""

    def resolve_utterance(self) -> str:
        final_text = self.accumulated_transcript.strip()
        if final_text:
            return final_text
        return self.last_interim_fragment.strip()

    def take_utterance(self) -> str:
        """Resolve the utterance and clear state without yielding to the event loop."""
        utterance = self.resolve_utterance()
        self.reset()
        return utterance


__all__ = ["TranscriptAccumulator"]
