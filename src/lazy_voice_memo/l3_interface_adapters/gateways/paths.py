"""Shared path constants for configuration, settings, models and logs."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path, user_log_path

APP_NAME = 'lazy-voice-memo'

CONFIG_DIR = user_config_path(APP_NAME)
SETTINGS_PATH = CONFIG_DIR / 'settings.yaml'
MODELS_DIR = user_data_path(APP_NAME) / 'whisper'
LOG_DIR = user_log_path(APP_NAME)

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]
