# -*- coding: utf-8 -*-
########################
# config.py
########################
# Purpose:
# - Typed settings for the gridbeat command: song library root, default difficulty and play mode,
#   music bar bucketing and log level.
#
# Design notes:
# - pydantic models hold the defaults and validate every value. Invalid values raise ValueError.
# - At most one UTF-8 JSON file is read. A missing file means defaults.
# - GRIDBEAT_* environment variables win over the file.
# - Reading is the only I/O. Nothing is created on disk.
#
# File lookup:
# - GRIDBEAT_CONFIG_PATH when set (the file must exist).
# - Otherwise the first existing of ./gridbeat_config.json and <user config dir>/gridbeat_config.json.
#
# Example gridbeat_config.json:
#   {"library": {"songs_dir": "/home/me/gridbeat/Songs"},
#    "play": {"difficulty": "extreme", "mode": "degree90"},
#    "scoring": {"bar_count": 120},
#    "logging": {"level": "DEBUG"}}
#
########################
# Interfaces:
# Public classes:
# - LibraryConfig, PlayConfig, ScoringConfig, LoggingConfig, AppConfig (pydantic models)
#
# Public functions:
# - load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, Optional[Path]]
# - get_config() -> tuple[AppConfig, Optional[Path]] (cached)
# - to_json(config: AppConfig) -> str
# - main() -> int (prints the effective config as JSON)
#
########################

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

import paths
from gameplay_models import normalize_difficulty, normalize_play_mode
from music_bar import DEFAULT_LEAD_IN_SECONDS
from scoring import DEFAULT_BAR_COUNT

CONFIG_FILE_NAME = "gridbeat_config.json"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class LibraryConfig(BaseModel):
    songs_dir: Path = Field(default_factory=paths.default_songs_dir, description="One sub-directory per song.")


class PlayConfig(BaseModel):
    difficulty: str = "extreme"
    mode: str = "normal"

    @field_validator("difficulty")
    @classmethod
    def _known_difficulty(cls, value: str) -> str:
        return normalize_difficulty(value).value

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str) -> str:
        return normalize_play_mode(value).value


class ScoringConfig(BaseModel):
    bar_count: int = Field(default=DEFAULT_BAR_COUNT, ge=1, le=1000)
    lead_in_seconds: float = Field(default=DEFAULT_LEAD_IN_SECONDS, ge=0.0)


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = str(value or "").strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}; got {value!r}")
        return level


class AppConfig(BaseModel):
    library: LibraryConfig = Field(default_factory=LibraryConfig)
    play: PlayConfig = Field(default_factory=PlayConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# (variable, section, key, converter)
_ENV_OVERRIDES: List[Tuple[str, str, str, Callable[[str], Any]]] = [
    ("GRIDBEAT_SONGS_DIR", "library", "songs_dir", str),
    ("GRIDBEAT_DIFFICULTY", "play", "difficulty", str),
    ("GRIDBEAT_MODE", "play", "mode", str),
    ("GRIDBEAT_BAR_COUNT", "scoring", "bar_count", int),
    ("GRIDBEAT_LOG_LEVEL", "logging", "level", str),
]


def _default_config_candidates() -> List[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path(user_config_dir("gridbeat", appauthor=False)) / CONFIG_FILE_NAME,
    ]


def _find_config_file() -> Optional[Path]:
    explicit = os.environ.get("GRIDBEAT_CONFIG_PATH", "").strip()
    if explicit:
        return Path(explicit)
    return next((candidate for candidate in _default_config_candidates() if candidate.exists()), None)


def _load_json_object(config_path: Path) -> Dict[str, Any]:
    # FileNotFoundError propagates unchanged so callers can tell "absent" from "broken".
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        document = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{config_path}: invalid JSON ({exc})") from exc
    if not isinstance(document, dict):
        raise ValueError(f"{config_path}: top level must be a JSON object")
    return document


def _with_environment(document: Dict[str, Any]) -> Dict[str, Any]:
    merged = {name: dict(section) if isinstance(section, dict) else section for name, section in document.items()}
    for variable, section_name, key, convert in _ENV_OVERRIDES:
        raw_value = os.environ.get(variable, "").strip()
        if not raw_value:
            continue
        try:
            value = convert(raw_value)
        except ValueError as exc:
            raise ValueError(f"{variable}={raw_value!r} is not valid") from exc
        section = merged.get(section_name)
        if not isinstance(section, dict):
            section = merged[section_name] = {}
        section[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = Path(config_path) if config_path is not None else _find_config_file()
    document = _load_json_object(resolved_path) if resolved_path is not None else {}

    try:
        config = AppConfig.model_validate(_with_environment(document))
    except ValidationError as exc:
        origin = resolved_path if resolved_path is not None else "built-in defaults"
        raise ValueError(f"Invalid gridbeat config ({origin}):\n{exc}") from exc
    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(mode="json"), ensure_ascii=False, indent=2)


def main() -> int:
    try:
        config, resolved_path = load_config()
    except (OSError, ValueError) as exc:
        print(json.dumps({"ok": False, "error": str(exc)}, ensure_ascii=False, indent=2))
        return 2

    print(
        json.dumps(
            {
                "ok": True,
                "config_path": str(resolved_path) if resolved_path is not None else None,
                "config": json.loads(to_json(config)),
            },
            ensure_ascii=False,
            indent=2,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
