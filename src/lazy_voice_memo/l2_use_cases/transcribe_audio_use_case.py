"""Use case: turn a normalized audio buffer into one transcript string."""

from __future__ import annotations

import logging
import os

from lazy_voice_memo.l1_entities.audio import AudioBuffer
from lazy_voice_memo.l1_entities.model_status import ModelDescriptor
from lazy_voice_memo.l1_entities.transcript import join_segments
from lazy_voice_memo.l2_use_cases.ports.transcriber import Transcriber

log = logging.getLogger('lvm.whisper')

MAX_THREADS = 8


def thread_count(cpu_count: int | None, max_threads: int = MAX_THREADS) -> int:
    """Leave one core free, clamped to [1, max_threads]."""
    return max(1, min(max_threads, (cpu_count or 1) - 1))


class TranscribeAudioUseCase:
    """Runs a single inference pass and joins the segments.

    Failures propagate unchanged; retrying is the caller's decision.
    """

    def __init__(self, transcriber: Transcriber, max_threads: int = MAX_THREADS, cpu_count: int | None = None) -> None:
        self._transcriber = transcriber
        self._max_threads = max_threads
        self._cpu_count = cpu_count

    def execute(self, audio: AudioBuffer, descriptor: ModelDescriptor) -> str:
        """Raises ModelNotFoundError if *descriptor* is not READY, TranscriptionFailedError on engine error."""
        model_path = descriptor.ready_path()
        n_threads = thread_count(self._cpu_count or os.cpu_count(), self._max_threads)
        log.info(
            'Transcribing %.1fs of audio (%d frames) with %s, %d threads',
            audio.duration,
            audio.frame_count,
            model_path,
            n_threads,
        )

        segments = self._transcriber.transcribe(audio, model_path, n_threads)
        transcript = join_segments(segments)
        log.info('Transcription produced %d segments, %d chars', len(segments), len(transcript))
        return transcript
