"""Port: audio file to engine-ready buffer."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from lazy_voice_memo.l1_entities.audio import AudioBuffer


class AudioNormalizer(Protocol):
    """Decodes any audio file into mono 16 kHz float samples."""

    def normalize(self, path: Path) -> AudioBuffer:
        """Raise InvalidAudioFileError or ConversionFailedError on failure."""
        ...
