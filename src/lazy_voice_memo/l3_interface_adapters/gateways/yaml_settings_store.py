"""Gateway: YAML-file settings store -- implements SettingsStore port."""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path

import yaml

from lazy_voice_memo.l1_entities.errors import ConfigError


class YamlSettingsStore:
    """Flat ``key: value`` string mapping kept in one YAML file.

    Every ``set``/``delete`` rewrites the file through a temp file and
    ``os.replace`` so a crash never leaves it half-written.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def _read(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding='utf-8')) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f'Settings file is not valid YAML: {self._path}') from exc
        if not isinstance(data, dict):
            raise ConfigError(f'Settings file must contain a mapping: {self._path}')
        return data

    def _write(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix='.settings.', suffix='.yaml', dir=self._path.parent)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
