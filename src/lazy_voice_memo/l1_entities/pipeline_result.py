"""Pipeline run result entity."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class PipelineStage(enum.Enum):
    ACQUIRE = 'acquire'
    NORMALIZE = 'normalize'
    TRANSCRIBE = 'transcribe'
    ENHANCE = 'enhance'
    TITLE = 'title'
    FOLLOW_UP = 'follow_up'


# Stages whose failure ends the run.
FATAL_STAGES = frozenset({PipelineStage.ACQUIRE, PipelineStage.NORMALIZE, PipelineStage.TRANSCRIBE})


class PipelineOutcome(enum.Enum):
    SUCCESS = 'success'
    PARTIAL = 'partial'
    FAILED = 'failed'


class PipelineResult(BaseModel):
    """Accumulated output of one recording run.

    Stages fill fields in order; a failed stage leaves its own field and every
    later field empty without clearing earlier ones.
    """

    audio_path: str
    original_transcript: str = ''
    enhanced_transcript: str = ''
    title: str | None = None
    follow_up_questions: list[str] | None = None
    outcome: PipelineOutcome = PipelineOutcome.SUCCESS
    failed_stage: PipelineStage | None = None
    error: str = ''
    created_at: datetime = Field(default_factory=datetime.now)

    def record_failure(self, stage: PipelineStage, error: Exception) -> None:
        """Mark *stage* as failed. Only the first failure is kept."""
        if self.failed_stage is None:
            self.failed_stage = stage
            self.error = str(error) or type(error).__name__
        if stage in FATAL_STAGES:
            self.outcome = PipelineOutcome.FAILED
        elif self.outcome is PipelineOutcome.SUCCESS:
            self.outcome = PipelineOutcome.PARTIAL
