"""Domain error types.

Each pipeline stage raises from exactly one family: acquisition, audio,
inference, or remote. Callers catch the family, not the library exceptions
underneath.
"""

from __future__ import annotations

import enum


class AcquisitionFailure(enum.Enum):
    NOT_FOUND = 'not_found'
    PERMISSION_DENIED = 'permission_denied'
    TRANSFER_FAILED = 'transfer_failed'
    USER_CANCELLED = 'user_cancelled'


class AcquisitionError(Exception):
    """Raised when the speech model cannot be made available locally."""

    def __init__(self, reason: AcquisitionFailure, message: str = '') -> None:
        self.reason = reason
        super().__init__(message or reason.value.replace('_', ' '))


class AudioError(Exception):
    """Base for audio normalization failures."""


class InvalidAudioFileError(AudioError):
    """Audio file is missing, unreadable, or has no audio track."""


class ConversionFailedError(AudioError):
    """Transcoding to 16 kHz mono PCM failed."""


class InferenceError(Exception):
    """Base for speech recognition failures."""


class ModelNotFoundError(InferenceError):
    """The model is not ready or its file does not exist."""


class TranscriptionFailedError(InferenceError):
    """The recognition engine reported an error."""


class RemoteError(Exception):
    """Base for completion endpoint failures."""


class NetworkError(RemoteError):
    """Transport failure or non-success HTTP status."""


class RemoteTimeoutError(NetworkError):
    """The completion request exceeded its timeout."""


class MalformedResponseError(RemoteError):
    """The completion response did not have the expected JSON shape."""


class ConfigError(Exception):
    """Raised when a configuration or settings file cannot be parsed."""
