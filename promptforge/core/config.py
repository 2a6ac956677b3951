"""Application configuration (env-driven settings).

The settings record is built once per process from, in increasing order of
precedence: built-in defaults, ``.env``, an optional per-provider profile file
(``.env.<profile>``, e.g. ``.env.ollama``) and the process environment.
"""

import logging
import os
import re
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit

from dotenv import dotenv_values
from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

_log = logging.getLogger(__name__)

_HTTP_URL = TypeAdapter(AnyHttpUrl)
_LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}
_PROFILE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")
_URL_FORBIDDEN = re.compile(r"[\s\\]")


class AIProvider(str, Enum):
    """Model-serving backends the application can talk to."""

    OLLAMA = "ollama"
    OPENAI = "openai"


class ConfigError(ValueError):
    """Raised when the configured values cannot form a valid settings record."""

    def __init__(self, message: str, errors: list[tuple[str, str]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "ConfigError":
        errors = [
            (".".join(str(part) for part in err["loc"]) or "settings", err["msg"])
            for err in exc.errors()
        ]
        details = "; ".join(f"{field}: {msg}" for field, msg in errors)
        return cls(f"Invalid settings: {details}", errors)


def _join_url(base: str, path: str) -> str:
    path = path.lstrip("/")
    return f"{base}/{path}" if path else base


class Settings(BaseModel):
    """Server port, database location, AI provider and the two base URLs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    PORT: int = Field(default=8080, ge=1, le=65535)
    DATABASE_PATH: str = "./api/promptforge.db"
    DEFAULT_AI_PROVIDER: AIProvider = AIProvider.OLLAMA
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    API_BASE_URL: str = "http://localhost:8080/api"

    @field_validator("PORT", mode="before")
    @classmethod
    def _reject_bool_port(cls, value):
        if isinstance(value, bool):
            raise ValueError("must be an integer, not a boolean")
        return value

    @field_validator("DATABASE_PATH")
    @classmethod
    def _check_database_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if "\x00" in value:
            raise ValueError("must not contain NUL characters")
        return value

    @field_validator("DEFAULT_AI_PROVIDER", mode="before")
    @classmethod
    def _normalise_provider(cls, value):
        if isinstance(value, str) and not isinstance(value, AIProvider):
            return value.strip().lower()
        return value

    @field_validator("OLLAMA_BASE_URL", "API_BASE_URL")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"{value!r} is not an absolute http(s) URL") from exc
        parts = urlsplit(value)
        if _URL_FORBIDDEN.search(value) or parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"{value!r} is not an absolute http(s) URL")
        # Kept verbatim apart from the trailing slash so paths join cleanly.
        return value.rstrip("/")

    @model_validator(mode="after")
    def _warn_on_api_port_mismatch(self) -> "Settings":
        api = urlsplit(self.API_BASE_URL)
        if api.hostname in _LOOPBACK_HOSTS and api.port is not None and api.port != self.PORT:
            _log.warning(
                "API_BASE_URL %s uses port %d but PORT is %d",
                self.API_BASE_URL,
                api.port,
                self.PORT,
            )
        return self

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | None]) -> "Settings":
        """Build settings from an environment-like mapping.

        Keys are matched case-insensitively against the field names; when a
        field appears under several spellings the exact upper-case key wins.
        Unknown keys are ignored and empty values count as unset.
        """
        try:
            return cls(**_pick_known(values))
        except ValidationError as exc:
            raise ConfigError.from_validation_error(exc) from exc

    def ollama_url(self, path: str = "") -> str:
        """Resolve ``path`` against the local model server's base URL."""
        return _join_url(self.OLLAMA_BASE_URL, path)

    def api_url(self, path: str = "") -> str:
        """Resolve ``path`` against the application's API base URL."""
        return _join_url(self.API_BASE_URL, path)

    def database_file(self, base_dir: str | Path | None = None) -> Path:
        """Return the absolute database location without touching the filesystem."""
        path = Path(self.DATABASE_PATH).expanduser()
        if not path.is_absolute():
            path = Path(base_dir if base_dir is not None else Path.cwd()) / path
        return path.resolve()

    def as_env(self) -> dict[str, str]:
        """Render the record as environment variables."""
        env = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            env[name] = value.value if isinstance(value, Enum) else str(value)
        return env


def _pick_known(values: Mapping[str, str | None]) -> dict[str, str]:
    known = {name.upper(): name for name in Settings.model_fields}
    picked = {}
    exact = set()
    for key, value in values.items():
        name = known.get(key.upper())
        if name is None or value is None or not str(value).strip():
            continue
        if key == name:
            exact.add(name)
        elif name in exact:
            continue
        picked[name] = value
    return picked


def profile_path(env_dir: str | Path, profile: str | None = None) -> Path:
    """Return ``.env`` or ``.env.<profile>`` inside ``env_dir``."""
    if profile is None:
        return Path(env_dir) / ".env"
    if not _PROFILE_NAME.match(profile):
        raise ConfigError(f"Invalid settings profile name: {profile!r}")
    return Path(env_dir) / f".env.{profile}"


def load_settings(
    profile: str | None = None,
    env_dir: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from ``.env``, the optional profile file and the environment."""
    env_dir = Path(env_dir) if env_dir is not None else Path.cwd()
    environ = os.environ if environ is None else environ

    values: dict[str, str] = {}
    sources: list[str] = []

    base_file = profile_path(env_dir)
    if base_file.is_file():
        _log.debug("Reading settings from %s", base_file)
        values.update(_pick_known(dotenv_values(base_file)))
        sources.append(str(base_file))

    if profile is not None:
        profile_file = profile_path(env_dir, profile)
        if profile_file.is_file():
            _log.debug("Reading settings profile %r from %s", profile, profile_file)
            values.update(_pick_known(dotenv_values(profile_file)))
            sources.append(str(profile_file))
        else:
            _log.warning("Settings profile %r not found at %s; skipping", profile, profile_file)

    from_environ = _pick_known(environ)
    if from_environ:
        values.update(from_environ)
        sources.append("environment")

    loaded = Settings.from_mapping(values)
    _log.info(
        "Loaded settings from %s (port=%d, provider=%s)",
        ", ".join(sources) or "defaults",
        loaded.PORT,
        loaded.DEFAULT_AI_PROVIDER.value,
    )
    return loaded


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return load_settings()


settings = get_settings()
