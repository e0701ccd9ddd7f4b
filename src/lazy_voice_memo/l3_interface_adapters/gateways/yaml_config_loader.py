"""Gateway: YAML configuration loader."""

from __future__ import annotations

from pathlib import Path

import yaml

from lazy_voice_memo.l1_entities.errors import ConfigError
from lazy_voice_memo.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS


class YamlConfigLoader:
    """Reads the user's YAML config and merges overrides on top.

    Returns a raw dict; defaults and validation are applied by the caller.
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        self._search_paths = DEFAULT_CONFIG_PATHS if search_paths is None else search_paths

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        data: dict = {}
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f'Config file not found: {path}')
            data = _read_yaml(path)
        else:
            for default_path in self._search_paths:
                if default_path.exists():
                    data = _read_yaml(default_path)
                    break
        if overrides:
            deep_merge(data, overrides)
        return data


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {path}: {exc}') from exc
    if not isinstance(data, dict):
        raise ConfigError(f'Config file must contain a mapping: {path}')
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
