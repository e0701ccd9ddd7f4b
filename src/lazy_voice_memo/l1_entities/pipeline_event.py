"""Pipeline progress events for the presentation layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from lazy_voice_memo.l1_entities.pipeline_result import PipelineStage


class StageStatus(enum.Enum):
    STARTED = 'started'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    SKIPPED = 'skipped'


@dataclass(frozen=True)
class PipelineEvent:
    stage: PipelineStage
    status: StageStatus
    detail: str = ''
