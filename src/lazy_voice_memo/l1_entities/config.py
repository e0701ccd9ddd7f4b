"""Configuration Pydantic models -- pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    name: str
    directory: str | None = None  # None -> platform data dir


class TranscriptionConfig(BaseModel):
    max_threads: int = Field(ge=1)


class EnhancementConfig(BaseModel):
    model: str
    temperature: float = Field(ge=0.0, le=2.0)
    timeout: float = Field(gt=0.0)


class AppConfig(BaseModel):
    model: ModelConfig
    transcription: TranscriptionConfig
    enhancement: EnhancementConfig
