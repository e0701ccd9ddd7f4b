"""Port: durable key-value settings."""

from __future__ import annotations

from typing import Protocol

RESOLVED_MODEL_PATH_KEY = 'resolved_model_path'


class SettingsStore(Protocol):
    """String settings persisted across process restarts."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if unset."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key* durably."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        ...
