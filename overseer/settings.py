"""Persisted app settings (provider selection, model, endpoint, feature toggles).

Stored as a flat JSON object in <data_dir>/settings.json and rewritten on
every change. get_settings() returns defaults merged with stored values;
a stored file that cannot be read as a settings object is ignored (logged)
so a bad file never prevents startup.

Secrets are not stored here: the Gemini API key comes from the environment
(GEMINI_API_KEY, usually via .env).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

_data_dir: Path | None = None


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    llm_provider: Literal["gemini", "lmstudio"] = "gemini"
    llm_model: str = "gemini-3-flash-preview"
    lmstudio_base_url: str = "http://localhost:1234/v1"
    enable_image_generation: bool = True
    autonomous_delay_seconds: float = Field(10.0, ge=0)


def init_settings(data_dir: Path) -> None:
    global _data_dir
    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_settings() before using settings"
    return _data_dir


def _settings_path() -> Path:
    return data_dir() / "settings.json"


def get_settings() -> Settings:
    """Read settings, returning defaults merged with stored values."""
    path = _settings_path()
    if not path.is_file():
        return Settings()
    try:
        stored = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return Settings()
    if not isinstance(stored, dict):
        logger.warning("Ignoring settings file %s: not a JSON object", path)
        return Settings()
    try:
        return Settings.model_validate(stored)
    except ValidationError as e:
        logger.warning("Ignoring invalid settings file %s: %s", path, e)
        return Settings()


def update_settings(fields: dict[str, Any]) -> Settings:
    """Merge fields into settings and persist. Returns the full settings.

    Raises ValidationError if the merged result is invalid; nothing is
    written in that case.
    """
    current = get_settings().model_dump()
    current.update(fields)
    updated = Settings.model_validate(current)
    _settings_path().write_text(updated.model_dump_json(indent=2))
    return updated
