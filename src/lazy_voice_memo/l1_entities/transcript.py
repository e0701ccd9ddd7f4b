"""Transcript segment entity."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field


class TranscriptSegment(BaseModel):
    """A single recognized speech span, in chronological order."""

    text: str
    start: float = Field(default=0.0, description='Offset in seconds from the start of the audio')
    end: float = Field(default=0.0, description='Offset in seconds from the start of the audio')


def join_segments(segments: Iterable[TranscriptSegment]) -> str:
    """Join segment texts with a single space and trim the result."""
    return ' '.join(seg.text for seg in segments).strip()
