"""Application configuration defaults."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

HOME_ENV_VAR = "NOTEDEX_HOME"
CONFIG_FILENAME = "config.json"
CACHE_FILENAME = "cache.json.gz"


class ConfigError(Exception):
    """The project configuration is unreadable or incomplete."""


class ConfigNotFoundError(ConfigError):
    """No project has been configured yet."""


def _get_default_home() -> Path:
    """Get the default data directory, honouring ``NOTEDEX_HOME``."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".notedex"


@dataclass(slots=True)
class AppConfig:
    home: Path | None = None

    def __post_init__(self) -> None:
        if self.home is None:
            self.home = _get_default_home()

    def resolve_home(self, base_dir: Path | None = None) -> Path:
        if self.home is None:
            self.home = _get_default_home()
        if Path(self.home).is_absolute() or base_dir is None:
            return Path(self.home)
        return base_dir / self.home

    def config_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve_home(base_dir) / CONFIG_FILENAME

    def cache_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve_home(base_dir) / CACHE_FILENAME


@dataclass(slots=True)
class ProjectConfig:
    """The directory whose files are indexed."""

    root: Path


def load_project_config(path: Path) -> ProjectConfig:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(f"No configuration at {path}; run `notedex config ROOT`") from exc
    try:
        data = json.loads(raw)
        return ProjectConfig(root=Path(data["root"]))
    except (ValueError, KeyError, TypeError) as exc:
        raise ConfigError(f"Invalid configuration at {path}: {exc}") from exc


def save_project_config(path: Path, config: ProjectConfig) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"root": str(config.root)}, indent=2), encoding="utf-8")
