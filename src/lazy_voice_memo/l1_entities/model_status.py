"""Speech model descriptor and acquisition status entities."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from lazy_voice_memo.l1_entities.errors import ModelNotFoundError


class ModelState(enum.Enum):
    UNKNOWN = 'unknown'
    NOT_FOUND = 'not_found'
    DOWNLOADING = 'downloading'
    READY = 'ready'
    ERROR = 'error'


@dataclass(frozen=True)
class ModelStatus:
    """Acquisition status. ``reason`` is set only for ERROR.

    ``progress`` is a fraction in [0, 1] while DOWNLOADING, or None when the
    total size is unknown.
    """

    state: ModelState
    reason: str = ''
    progress: float | None = None

    @classmethod
    def unknown(cls) -> ModelStatus:
        return cls(ModelState.UNKNOWN)

    @classmethod
    def not_found(cls) -> ModelStatus:
        return cls(ModelState.NOT_FOUND)

    @classmethod
    def downloading(cls, progress: float | None = None) -> ModelStatus:
        return cls(ModelState.DOWNLOADING, progress=progress)

    @classmethod
    def ready(cls) -> ModelStatus:
        return cls(ModelState.READY)

    @classmethod
    def error(cls, reason: str) -> ModelStatus:
        return cls(ModelState.ERROR, reason=reason)

    @property
    def is_ready(self) -> bool:
        return self.state is ModelState.READY

    def describe(self) -> str:
        match self.state:
            case ModelState.UNKNOWN:
                return 'Checking model...'
            case ModelState.NOT_FOUND:
                return 'Model not found'
            case ModelState.DOWNLOADING:
                if self.progress is None:
                    return 'Downloading model (size unknown)'
                return f'Downloading model: {self.progress:.0%}'
            case ModelState.READY:
                return 'Model ready'
            case ModelState.ERROR:
                return f'Model error: {self.reason}'


class ModelDescriptor(BaseModel):
    """Identifies the whisper model: name, resolved path, and status."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    status: ModelStatus = ModelStatus.unknown()

    def ready_path(self) -> str:
        """Return the model path, or raise if the model is not READY."""
        if not self.status.is_ready:
            raise ModelNotFoundError(f'Model {self.name!r} is not ready ({self.status.describe()})')
        return self.path
