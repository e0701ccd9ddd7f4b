"""Infrastructure provider configs -- lives in L4, not domain."""

from __future__ import annotations

import copy
import os
from pathlib import Path

from pydantic import BaseModel, Field

from lazy_voice_memo.l1_entities.config import AppConfig
from lazy_voice_memo.l3_interface_adapters.gateways.openai_completion_client import DEFAULT_BASE_URL, LOCAL_API_KEY
from lazy_voice_memo.l3_interface_adapters.gateways.paths import MODELS_DIR, SETTINGS_PATH
from lazy_voice_memo.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

BASE_URL_ENV = 'LAZY_VOICE_MEMO_LLM_BASE_URL'

APP_CONFIG_DEFAULTS: dict = {
    'model': {
        'name': 'large-v3',
        'directory': None,
    },
    'transcription': {
        'max_threads': 8,
    },
    'enhancement': {
        'model': 'local-model',
        'temperature': 0.7,
        'timeout': 60.0,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


def models_dir(config: AppConfig) -> Path:
    return Path(config.model.directory).expanduser() if config.model.directory else MODELS_DIR


class LLMProviderConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = LOCAL_API_KEY


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    llm: LLMProviderConfig = Field(default_factory=LLMProviderConfig)
    settings_path: Path = SETTINGS_PATH

    def with_env(self, environ: dict | None = None) -> InfraConfig:
        """Apply environment overrides on top of file config."""
        env = os.environ if environ is None else environ
        base_url = env.get(BASE_URL_ENV)
        if not base_url:
            return self
        return self.model_copy(update={'llm': self.llm.model_copy(update={'base_url': base_url})})
