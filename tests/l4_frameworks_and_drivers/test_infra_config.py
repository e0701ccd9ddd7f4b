"""Tests for L4 infra config defaults and build_app_config factory."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from lazy_voice_memo.l3_interface_adapters.gateways.paths import MODELS_DIR
from lazy_voice_memo.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader
from lazy_voice_memo.l4_frameworks_and_drivers.infra_config import (
    BASE_URL_ENV,
    InfraConfig,
    build_app_config,
    models_dir,
)


class TestBuildAppConfig:
    def test_defaults_produce_valid_config(self):
        cfg = build_app_config({})
        assert cfg.model.name == 'large-v3'
        assert cfg.model.directory is None
        assert cfg.transcription.max_threads == 8
        assert cfg.enhancement.model == 'local-model'
        assert cfg.enhancement.temperature == 0.7
        assert cfg.enhancement.timeout == 60.0

    def test_user_overrides_take_precedence(self):
        cfg = build_app_config({'enhancement': {'temperature': 0.2}})
        assert cfg.enhancement.temperature == 0.2
        assert cfg.enhancement.timeout == 60.0  # default preserved

    def test_from_yaml_file(self, sample_config_yaml: Path):
        cfg = build_app_config(YamlConfigLoader().load_raw(str(sample_config_yaml)))
        assert cfg.model.name == 'small'
        assert cfg.transcription.max_threads == 4
        assert cfg.enhancement.model == 'qwen2.5-7b-instruct'

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            build_app_config({'transcription': {'max_threads': 0}})

    def test_defaults_not_mutated(self):
        build_app_config({'model': {'name': 'tiny'}})
        assert build_app_config({}).model.name == 'large-v3'


class TestModelsDir:
    def test_default_is_platform_data_dir(self):
        assert models_dir(build_app_config({})) == MODELS_DIR

    def test_user_directory_expanded(self):
        cfg = build_app_config({'model': {'directory': '~/models'}})
        assert models_dir(cfg) == Path('~/models').expanduser()


class TestInfraConfig:
    def test_defaults_target_local_server(self):
        infra = InfraConfig()
        assert infra.llm.base_url == 'http://localhost:1234/v1'
        assert infra.llm.api_key

    def test_reads_llm_section_and_ignores_app_keys(self, sample_config_yaml: Path):
        infra = InfraConfig.model_validate(YamlConfigLoader().load_raw(str(sample_config_yaml)))
        assert infra.llm.base_url == 'http://127.0.0.1:8080/v1'

    def test_env_overrides_base_url(self):
        infra = InfraConfig().with_env({BASE_URL_ENV: 'http://gpu-box:1234/v1'})
        assert infra.llm.base_url == 'http://gpu-box:1234/v1'

    def test_empty_env_keeps_file_value(self):
        infra = InfraConfig().with_env({BASE_URL_ENV: ''})
        assert infra.llm.base_url == 'http://localhost:1234/v1'
