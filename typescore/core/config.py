from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_DIR = Path.home() / ".typescore"
DEFAULT_CONFIG_FILE = DEFAULT_DIR / "config.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    data_file: Path = field(default_factory=lambda: DEFAULT_DIR / "results.jsonl")
    log_level: str = "INFO"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from YAML.

    With no *path*, ``~/.typescore/config.yaml`` is read if it exists and
    defaults are used otherwise. An explicit *path* must exist.
    """
    if path is None:
        path = DEFAULT_CONFIG_FILE
        if not path.exists():
            return Settings()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a YAML mapping")

    defaults = Settings()
    data_file = raw.get("data_file", defaults.data_file)
    if not isinstance(data_file, (str, Path)) or not str(data_file).strip():
        raise ValueError(f"{path.name}: invalid 'data_file'")
    log_level = raw.get("log_level", defaults.log_level)
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"{path.name}: invalid 'log_level' {log_level!r}")

    data_path = Path(data_file).expanduser()
    if not data_path.is_absolute():
        # relative paths are relative to the config file
        data_path = path.parent / data_path
    return Settings(data_file=data_path, log_level=log_level.upper())
