"""
Settings - API key and preferred model

Stored as JSON in $VIETCORRECT_HOME/settings.json (default ~/.vietcorrect).
GEMINI_API_KEY in the environment overrides the stored key.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ai_service import DEFAULT_MODEL, get_model

logger = logging.getLogger("vietcorrect.settings")

API_KEY_ENV = "GEMINI_API_KEY"
HOME_ENV = "VIETCORRECT_HOME"
SETTINGS_FILE = "settings.json"


class AppSettings(BaseModel):
    """User settings persisted between runs."""
    api_key: Optional[str] = Field(None, description="Gemini API key")
    model: str = Field(DEFAULT_MODEL, description="Preferred Gemini model id")


def get_settings_dir() -> Path:
    return Path(os.environ.get(HOME_ENV) or Path.home() / ".vietcorrect")


def get_settings_path() -> Path:
    return get_settings_dir() / SETTINGS_FILE


def _load_stored() -> AppSettings:
    path = get_settings_path()
    if not path.exists():
        return AppSettings()
    try:
        return AppSettings.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return AppSettings()


def load_settings() -> AppSettings:
    """Stored settings, defaults if the file is missing or unreadable."""
    settings = _load_stored()
    env_key = os.environ.get(API_KEY_ENV)
    if env_key:
        settings.api_key = env_key
    return settings


def save_settings(settings: AppSettings) -> Path:
    path = get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Settings saved to %s", path)
    return path


def set_api_key(api_key: str) -> AppSettings:
    if not api_key or not api_key.strip():
        raise ValueError("No API key provided")
    settings = _load_stored()
    settings.api_key = api_key.strip()
    save_settings(settings)
    return settings


def set_model(model_id: str) -> AppSettings:
    if get_model(model_id) is None:
        raise ValueError(f"Unknown model: {model_id}")
    settings = _load_stored()
    settings.model = model_id
    save_settings(settings)
    return settings
