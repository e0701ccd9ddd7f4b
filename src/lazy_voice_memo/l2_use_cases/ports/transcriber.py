"""Port: speech-to-text transcription engine."""

from __future__ import annotations

from typing import Protocol

from lazy_voice_memo.l1_entities.audio import AudioBuffer
from lazy_voice_memo.l1_entities.transcript import TranscriptSegment


class Transcriber(Protocol):
    """Abstract transcription engine. Zero framework types leak through."""

    def transcribe(self, audio: AudioBuffer, model_path: str, n_threads: int) -> list[TranscriptSegment]:
        """Run one inference pass. The engine context lives only for this call."""
        ...
