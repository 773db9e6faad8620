from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import DEFAULT_STRATEGY, Strategy
from .utils import env_path, load_yaml_file, parse_env_bool

CONFIG_ENV_VAR = "ZENSORT_CONFIG"

_KNOWN_SETTINGS = frozenset({"root", "strategy", "sweep_on_start", "log_level", "log_file"})


@dataclass
class Settings:
    root: Path | None = None
    strategy: Strategy = DEFAULT_STRATEGY
    sweep_on_start: bool = True
    log_level: str = "INFO"
    log_file: Path | None = None


@dataclass
class AppConfig:
    settings: Settings = field(default_factory=Settings)
    source: Path | None = None


def _optional_path(value: Any, *, field_name: str) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a path string")
    cleaned = value.strip()
    if not cleaned:
        return None
    return Path(cleaned).expanduser()


def _coerce_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    parsed = parse_env_bool(value) if isinstance(value, str) else None
    if parsed is None:
        raise ValueError(f"'{field_name}' must be a boolean")
    return parsed


def _coerce_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"'settings.log_level' must be a logging level name, got '{value}'")
    return level


def _build_settings(data: dict[str, Any]) -> Settings:
    if not data:
        return Settings()
    if not isinstance(data, dict):
        raise ValueError("'settings' must be provided as a mapping when specified")

    unknown = sorted(set(data) - _KNOWN_SETTINGS)
    if unknown:
        raise ValueError(f"Unknown key(s) under 'settings': {', '.join(unknown)}")

    try:
        strategy = Strategy.parse(data.get("strategy", DEFAULT_STRATEGY))
    except ValueError as exc:
        raise ValueError(f"'settings.strategy': {exc}") from exc

    return Settings(
        root=_optional_path(data.get("root"), field_name="settings.root"),
        strategy=strategy,
        sweep_on_start=_coerce_bool(data.get("sweep_on_start", True), field_name="settings.sweep_on_start"),
        log_level=_coerce_log_level(data.get("log_level", "INFO")),
        log_file=_optional_path(data.get("log_file"), field_name="settings.log_file"),
    )


def load_config(path: Path) -> AppConfig:
    data = load_yaml_file(path)
    return AppConfig(settings=_build_settings(data.get("settings", {}) or {}), source=path)


def resolve_config_path(explicit: Path | None = None) -> Path | None:
    """The config file to load: ``explicit`` if given, else ``$ZENSORT_CONFIG``."""
    if explicit is not None:
        return explicit.expanduser()
    return env_path(CONFIG_ENV_VAR)


def load_app_config(explicit: Path | None = None) -> AppConfig:
    """Load the resolved config file, or defaults when none is configured."""
    path = resolve_config_path(explicit)
    if path is None:
        return AppConfig()
    if not path.is_file():
        raise ValueError(f"Config file not found: {path}")
    return load_config(path)
