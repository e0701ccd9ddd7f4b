"""Normalized audio buffer entity."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lazy_voice_memo.l1_entities.audio_constants import CHANNELS, SAMPLE_RATE


@dataclass(frozen=True)
class AudioBuffer:
    """Mono 16 kHz float32 samples in roughly [-1, 1].

    The sample array is made read-only on construction so consumers cannot
    mutate it in place.
    """

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS

    def __post_init__(self) -> None:
        if self.samples.ndim != 1:
            raise ValueError(f'AudioBuffer expects 1-D samples, got {self.samples.ndim}-D')
        self.samples.setflags(write=False)

    @property
    def frame_count(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        return self.frame_count / self.sample_rate
