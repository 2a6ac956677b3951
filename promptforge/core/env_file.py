"""Read and write settings as dotenv files shared with non-Python tooling."""

import logging
from pathlib import Path

from dotenv import dotenv_values, set_key

from promptforge.core.config import ConfigError, Settings, profile_path

__all__ = ["profile_path", "read_env_file", "write_env_file"]

_log = logging.getLogger(__name__)


def write_env_file(settings: Settings, path: str | Path) -> Path:
    """Write the settings into ``path``, updating existing keys in place."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
    for key, value in settings.as_env().items():
        set_key(str(path), key, value)
    _log.info("Wrote settings to %s", path)
    return path


def read_env_file(path: str | Path) -> Settings:
    """Build settings from a single dotenv file, ignoring unrelated keys."""
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")
    return Settings.from_mapping(dotenv_values(path))
