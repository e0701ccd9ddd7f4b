"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import threading
import wave
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from lazy_voice_memo.l1_entities.audio import AudioBuffer
from lazy_voice_memo.l1_entities.config import AppConfig
from lazy_voice_memo.l1_entities.errors import AcquisitionError, AcquisitionFailure
from lazy_voice_memo.l1_entities.model_status import ModelDescriptor
from lazy_voice_memo.l1_entities.transcript import TranscriptSegment
from lazy_voice_memo.l2_use_cases.ports.acquisition_chooser import AcquisitionChoice
from lazy_voice_memo.l4_frameworks_and_drivers.infra_config import build_app_config

# --- Protocol-conforming Fakes ---


class FakeCompletionClient:
    """Fake completion client for L2 use case tests.

    Responses are matched by a substring of the prompt; unmatched prompts get
    the default response. An exception in place of a response is raised.
    """

    def __init__(self, response: str = 'Fake completion'):
        self._default: str | Exception = response
        self._rules: list[tuple[str, str | Exception]] = []
        self.prompts: list[str] = []
        self._connectivity = (True, '')

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self._default
        for needle, candidate in self._rules:
            if needle in prompt:
                reply = candidate
                break
        if isinstance(reply, Exception):
            raise reply
        return reply

    def check_connectivity(self) -> tuple[bool, str]:
        return self._connectivity

    def set_response(self, response: str | Exception) -> None:
        self._default = response

    def respond_to(self, needle: str, response: str | Exception) -> None:
        """Most recently added rule wins."""
        self._rules.insert(0, (needle, response))


class FakeTranscriber:
    """Fake transcriber for L2 use case tests."""

    def __init__(self, segments: list[TranscriptSegment] | None = None, error: Exception | None = None):
        self._segments = segments or []
        self._error = error
        self.transcribe_calls: list[tuple[AudioBuffer, str, int]] = []

    def transcribe(self, audio: AudioBuffer, model_path: str, n_threads: int) -> list[TranscriptSegment]:
        self.transcribe_calls.append((audio, model_path, n_threads))
        if self._error is not None:
            raise self._error
        return self._segments

    def set_segments(self, segments: list[TranscriptSegment]) -> None:
        self._segments = segments


class FakeNormalizer:
    """Fake audio normalizer: returns a fixed buffer or raises."""

    def __init__(self, buffer: AudioBuffer | None = None, error: Exception | None = None):
        self._buffer = buffer if buffer is not None else AudioBuffer(samples=np.zeros(16000, dtype=np.float32))
        self._error = error
        self.calls: list[Path] = []

    def normalize(self, path: Path) -> AudioBuffer:
        self.calls.append(path)
        if self._error is not None:
            raise self._error
        return self._buffer


class FakeDownloader:
    """Fake model downloader.

    Writes *payload* to the destination after reporting *progress_steps*.
    With ``block=True`` it waits on ``release`` before finishing, honouring
    ``is_cancelled`` while it waits.
    """

    def __init__(
        self,
        payload: bytes = b'ggml',
        progress_steps: list[float | None] | None = None,
        error: Exception | None = None,
        block: bool = False,
    ):
        self._payload = payload
        self._steps = [0.0, 0.5, 1.0] if progress_steps is None else progress_steps
        self._error = error
        self._block = block
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls: list[tuple[str, Path]] = []

    def download(
        self,
        url: str,
        destination: Path,
        *,
        on_progress: Callable[[float | None], None] | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> Path:
        self.calls.append((url, destination))
        self.started.set()
        if self._block:
            while not self.release.wait(0.01):
                if is_cancelled is not None and is_cancelled():
                    raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'cancelled')
        if self._error is not None:
            raise self._error
        for step in self._steps:
            if is_cancelled is not None and is_cancelled():
                raise AcquisitionError(AcquisitionFailure.USER_CANCELLED, 'cancelled')
            if on_progress is not None:
                on_progress(step)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self._payload)
        return destination


class FakeSettingsStore:
    """In-memory settings store."""

    def __init__(self, values: dict[str, str] | None = None, fail_writes: bool = False):
        self.values: dict[str, str] = dict(values or {})
        self._fail_writes = fail_writes

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self._fail_writes:
            raise PermissionError('read-only settings')
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class ScriptedChooser:
    """Returns queued choices in order and records each descriptor it was shown."""

    def __init__(self, *choices: AcquisitionChoice):
        self._choices = list(choices)
        self.seen: list[ModelDescriptor] = []

    def choose(self, descriptor: ModelDescriptor) -> AcquisitionChoice:
        self.seen.append(descriptor)
        if not self._choices:
            return AcquisitionChoice.cancel()
        return self._choices.pop(0)


# --- Helpers ---


def write_wav(path: Path, samples: np.ndarray, rate: int = 16000, channels: int = 1) -> Path:
    """Write int16 *samples* as a PCM WAV file."""
    with wave.open(str(path), 'wb') as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(samples.astype('<i2').tobytes())
    return path


# --- Standard Fixtures ---


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def model_file(tmp_path: Path) -> Path:
    p = tmp_path / 'models' / 'ggml-large-v3.bin'
    p.parent.mkdir(parents=True)
    p.write_bytes(b'ggml')
    return p


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
model:
  name: "small"
  directory: "~/whisper-models"
transcription:
  max_threads: 4
enhancement:
  model: "qwen2.5-7b-instruct"
  temperature: 0.3
  timeout: 30
llm:
  base_url: "http://127.0.0.1:8080/v1"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p


@pytest.fixture
def fake_completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_settings() -> FakeSettingsStore:
    return FakeSettingsStore()
