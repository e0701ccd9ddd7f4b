"""Gateway: whisper.cpp transcriber -- implements Transcriber port."""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

import numpy as np
from pywhispercpp.model import Model

from lazy_voice_memo.l1_entities.audio import AudioBuffer
from lazy_voice_memo.l1_entities.errors import ModelNotFoundError, TranscriptionFailedError
from lazy_voice_memo.l1_entities.transcript import TranscriptSegment

log = logging.getLogger('lvm.whisper')

GREEDY_STRATEGY = 0  # whisper_sampling_strategy.WHISPER_SAMPLING_GREEDY

# Inference params shared by every call; n_threads is added per call.
INFERENCE_PARAMS: dict = {
    'language': 'auto',
    'translate': False,
    'print_realtime': False,
    'print_progress': False,
    'print_timestamps': False,
    'print_special': False,
    'no_context': False,
    'single_segment': False,
}


@contextlib.contextmanager
def _suppress_c_stdout():
    """Redirect C-level stdout and stderr to /dev/null.

    whisper.cpp prints init/progress messages directly via C fprintf,
    bypassing Python's sys.stdout and the logging setup.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    old_stdout = os.dup(1)
    old_stderr = os.dup(2)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stdout, 1)
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stdout)
        os.close(old_stderr)


class WhisperTranscriber:
    """pywhispercpp adapter. Loads a fresh engine context per call and frees it on exit.

    GPU offload (Metal/CUDA) follows the whisper.cpp build's context default.
    """

    def transcribe(self, audio: AudioBuffer, model_path: str, n_threads: int) -> list[TranscriptSegment]:
        if not Path(model_path).is_file():
            # pywhispercpp treats unknown paths as model names and downloads them.
            raise ModelNotFoundError(f'Model file not found: {model_path}')

        samples = np.array(audio.samples, dtype=np.float32, copy=True)
        model: Model | None = None
        try:
            with _suppress_c_stdout():
                model = Model(model_path, params_sampling_strategy=GREEDY_STRATEGY, **INFERENCE_PARAMS)
                raw_segments = model.transcribe(samples, n_threads=n_threads)
        except Exception as exc:
            log.error('whisper.cpp inference failed: %s', exc, exc_info=True)
            raise TranscriptionFailedError(f'Transcription failed: {exc}') from exc
        finally:
            if model is not None:
                with _suppress_c_stdout():
                    del model

        result: list[TranscriptSegment] = []
        for seg in raw_segments:
            text = seg.text.strip()
            if text:
                result.append(TranscriptSegment(text=text, start=seg.t0 / 100.0, end=seg.t1 / 100.0))
        return result
