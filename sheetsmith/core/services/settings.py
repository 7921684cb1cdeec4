"""Library settings loaded from an optional YAML file and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Set

import yaml

SETTINGS_ENV = "SHEETSMITH_SETTINGS"
DATA_PATH_ENV = "SHEETSMITH_DATA_PATH"
LOG_LEVEL_ENV = "SHEETSMITH_LOG_LEVEL"

DEFAULT_DATA_PATH = Path(__file__).resolve().parents[2] / "data"


@dataclass
class Settings:
    data_path: Path = DEFAULT_DATA_PATH
    # None means every package found under the data path is active.
    active_packages: Optional[Set[str]] = None
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        known = {"data_path", "active_packages", "log_level", "log_file"}
        data_path = data.get("data_path")
        packages = data.get("active_packages")
        log_file = data.get("log_file")
        return cls(
            data_path=Path(data_path) if data_path else DEFAULT_DATA_PATH,
            active_packages={str(name) for name in packages} if packages is not None else None,
            log_level=str(data.get("log_level") or "WARNING").upper(),
            log_file=Path(log_file) if log_file else None,
            extra={k: v for k, v in data.items() if k not in known},
        )


_SETTINGS: Optional[Settings] = None


def load_settings(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from a YAML file, then apply environment overrides.

    The file is taken from ``path`` or the ``SHEETSMITH_SETTINGS`` variable; a
    missing file falls back to defaults.
    """

    env = os.environ if environ is None else environ
    source = path or (Path(env[SETTINGS_ENV]) if env.get(SETTINGS_ENV) else None)

    payload: Dict[str, Any] = {}
    if source is not None and source.exists():
        loaded = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        if not isinstance(loaded, Mapping):
            raise ValueError(f"Settings file {source} must contain a mapping")
        payload = dict(loaded)

    if env.get(DATA_PATH_ENV):
        payload["data_path"] = env[DATA_PATH_ENV]
    if env.get(LOG_LEVEL_ENV):
        payload["log_level"] = env[LOG_LEVEL_ENV]

    return Settings.from_dict(payload)


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def reload_settings() -> Settings:
    """Drop the memoized settings and read them again."""
    global _SETTINGS
    _SETTINGS = None
    return get_settings()


__all__ = ["Settings", "get_settings", "load_settings", "reload_settings"]
