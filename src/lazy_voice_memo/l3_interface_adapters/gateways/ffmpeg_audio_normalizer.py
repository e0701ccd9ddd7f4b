"""Gateway: ffmpeg audio normalizer -- implements AudioNormalizer port."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess  # noqa: S404 -- intentional: shells out to ffmpeg with a fixed arg list, not shell=True
import tempfile
import wave
from pathlib import Path

import numpy as np

from lazy_voice_memo.l1_entities.audio import AudioBuffer
from lazy_voice_memo.l1_entities.audio_constants import CHANNELS, INT16_SCALE, SAMPLE_RATE, SAMPLE_WIDTH
from lazy_voice_memo.l1_entities.errors import ConversionFailedError, InvalidAudioFileError

log = logging.getLogger('lvm.audio')

_FFMPEG_TIMEOUT = 300  # seconds
_NO_AUDIO_MARKERS = ('matches no streams', 'does not contain any stream', 'Output file is empty')


def build_ffmpeg_command(source: Path, target: Path) -> list[str]:
    """First audio stream of *source* -> 16 kHz mono signed 16-bit WAV at *target*."""
    return [
        'ffmpeg',
        '-nostdin',
        '-y',
        '-v',
        'error',
        '-i',
        str(source),
        '-map',
        '0:a:0',
        '-ar',
        str(SAMPLE_RATE),
        '-ac',
        str(CHANNELS),
        '-c:a',
        'pcm_s16le',
        '-f',
        'wav',
        str(target),
    ]


class FfmpegAudioNormalizer:
    """Transcodes any ffmpeg-readable file to the engine's input format.

    The intermediate WAV lives in a private temporary directory that is
    removed before ``normalize`` returns or raises.
    """

    def __init__(self, timeout: float = _FFMPEG_TIMEOUT) -> None:
        self._timeout = timeout

    def normalize(self, path: Path) -> AudioBuffer:
        if not path.is_file():
            raise InvalidAudioFileError(f'Audio file not found: {path}')
        if not os.access(path, os.R_OK):
            raise InvalidAudioFileError(f'Audio file is not readable: {path}')

        if shutil.which('ffmpeg') is None:
            raise ConversionFailedError(
                'ffmpeg is required but not found on PATH.\n  macOS:  brew install ffmpeg\n  Debian: apt install ffmpeg'
            )

        with tempfile.TemporaryDirectory(prefix='lvm-audio-') as tmp_dir:
            wav_path = Path(tmp_dir) / 'normalized.wav'
            self._transcode(path, wav_path)
            samples = read_pcm16_wav(wav_path)

        if len(samples) == 0:
            raise InvalidAudioFileError(f'Audio file contains no audio frames: {path}')

        buffer = AudioBuffer(samples=samples)
        log.info('Normalized %s: %d frames (%.1fs)', path, buffer.frame_count, buffer.duration)
        return buffer

    def _transcode(self, source: Path, target: Path) -> None:
        cmd = build_ffmpeg_command(source, target)
        log.debug('Running: %s', ' '.join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self._timeout)  # noqa: S603
        except subprocess.TimeoutExpired as exc:
            raise ConversionFailedError(f'ffmpeg timed out after {self._timeout}s processing: {source}') from exc
        except OSError as exc:
            raise ConversionFailedError(f'Failed to launch ffmpeg: {exc}') from exc

        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        if result.returncode != 0:
            if any(marker in stderr for marker in _NO_AUDIO_MARKERS):
                raise InvalidAudioFileError(f'No audio track in: {source}')
            raise ConversionFailedError(f'ffmpeg exited with code {result.returncode} for: {source}\n{stderr}')
        if not target.exists():
            raise ConversionFailedError(f'ffmpeg produced no output for: {source}')


def read_pcm16_wav(path: Path) -> np.ndarray:
    """Read a 16 kHz mono 16-bit WAV and scale samples to float32 in about [-1, 1].

    The returned length equals the WAV's frame count exactly.
    """
    try:
        with wave.open(str(path), 'rb') as wav:
            channels = wav.getnchannels()
            rate = wav.getframerate()
            width = wav.getsampwidth()
            n_frames = wav.getnframes()
            raw = wav.readframes(n_frames)
    except (wave.Error, EOFError) as exc:
        raise ConversionFailedError(f'Unreadable intermediate WAV: {exc}') from exc

    if (channels, rate, width) != (CHANNELS, SAMPLE_RATE, SAMPLE_WIDTH):
        raise ConversionFailedError(
            f'Unexpected intermediate format: {channels} ch, {rate} Hz, {width * 8}-bit '
            f'(want {CHANNELS} ch, {SAMPLE_RATE} Hz, {SAMPLE_WIDTH * 8}-bit)'
        )

    if len(raw) % SAMPLE_WIDTH:
        raise ConversionFailedError(f'Truncated intermediate WAV: {len(raw)} data bytes is not whole 16-bit samples')
    pcm = np.frombuffer(raw, dtype='<i2')
    if len(pcm) != n_frames:
        raise ConversionFailedError(f'Decoded {len(pcm)} samples but header declares {n_frames} frames')
    return pcm.astype(np.float32) / INT16_SCALE
