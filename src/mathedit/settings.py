"""Editor settings with JSON persistence.

Three-level precedence: overrides > project settings > global settings.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".mathedit"
SETTINGS_FILE_NAME = "settings.json"

PopoverPolicy = Literal["auto", "off"]
StyleBias = Literal["left", "right", "none"]


class MathfieldSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    popover_policy: PopoverPolicy = Field(default="auto", alias="popoverPolicy")
    style_bias: StyleBias = Field(default="left", alias="styleBias")
    default_mode: Literal["math", "text"] = Field(default="math", alias="defaultMode")
    bare_word_suggestions: bool = Field(default=True, alias="bareWordSuggestions")
    min_bare_word_length: int = Field(default=2, ge=1, alias="minBareWordLength")
    max_suggestions: int = Field(default=50, ge=1, alias="maxSuggestions")
    max_visible_suggestions: int = Field(default=9, ge=1, alias="maxVisibleSuggestions")
    popover_settle_delay_ms: int = Field(default=32, ge=0, alias="popoverSettleDelayMs")
    undo_depth: int = Field(default=100, ge=1, alias="undoDepth")
    macros: dict[str, str] = Field(default_factory=dict)
    keybindings: dict[str, str | list[str]] = Field(default_factory=dict)

    @field_validator("macros")
    @classmethod
    def _macro_names_are_commands(cls, value: dict[str, str]) -> dict[str, str]:
        for name in value:
            if not name.startswith("\\") or len(name) < 2:
                raise ValueError(f"macro name must be a control sequence: {name!r}")
        return value


def merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into ``base``; ``None`` never overrides."""
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merge_settings(current, value)
        else:
            result[key] = value
    return result


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(data, dict):
        return {}, ValueError(f"{path}: expected a JSON object")
    return data, None


def default_settings_path() -> str:
    """Global settings file (~/.mathedit/settings.json)."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, SETTINGS_FILE_NAME)


def load_settings(
    path: str | None = None,
    *,
    project_dir: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> MathfieldSettings:
    """Load and merge global, project and override settings.

    Unreadable files are logged and skipped. Invalid values raise ValueError.
    """
    sources = [path or default_settings_path()]
    if project_dir:
        sources.append(os.path.join(project_dir, CONFIG_DIR_NAME, SETTINGS_FILE_NAME))

    merged: dict[str, Any] = {}
    for source in sources:
        data, error = _load_from_file(source)
        if error is not None:
            logger.warning("Ignoring settings file %s: %s", source, error)
            continue
        merged = merge_settings(merged, data)
    merged = merge_settings(merged, overrides or {})

    try:
        return MathfieldSettings.model_validate(merged)
    except ValidationError as e:
        raise ValueError(f"Invalid mathfield settings: {e}") from e


def save_settings(settings: MathfieldSettings, path: str) -> None:
    """Write non-default settings, camelCase keys."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    data = settings.model_dump(by_alias=True, exclude_defaults=True)
    Path(path).write_text(
        json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
