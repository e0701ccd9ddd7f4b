"""Port: user decision on how to acquire a missing model."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

from lazy_voice_memo.l1_entities.model_status import ModelDescriptor


class AcquisitionAction(enum.Enum):
    DOWNLOAD = 'download'
    LOCATE = 'locate'
    CANCEL = 'cancel'


@dataclass(frozen=True)
class AcquisitionChoice:
    action: AcquisitionAction
    path: str = ''  # only for LOCATE

    @classmethod
    def download(cls) -> AcquisitionChoice:
        return cls(AcquisitionAction.DOWNLOAD)

    @classmethod
    def locate(cls, path: str) -> AcquisitionChoice:
        return cls(AcquisitionAction.LOCATE, path=path)

    @classmethod
    def cancel(cls) -> AcquisitionChoice:
        return cls(AcquisitionAction.CANCEL)


class AcquisitionChooser(Protocol):
    """Asks the user whether to download, locate, or give up. May block."""

    def choose(self, descriptor: ModelDescriptor) -> AcquisitionChoice:
        ...
