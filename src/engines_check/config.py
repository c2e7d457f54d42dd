"""Configuration loader for engines-check.

Settings are read from an optional JSON file and then overridden by
environment variables. Command-line flags override both (see ``cli``).
Recognised keys: ``engine``, ``mode``, ``quiet``, ``warnOnly``, ``logLevel``.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .core import Mode
from .logger import LOG_LEVELS

DEFAULT_CONFIG_NAME = ".engines-check.json"
CONFIG_PATH_ENV_VAR = "ENGINES_CHECK_CONFIG"
ENV_PREFIX = "ENGINES_CHECK_"

_TRUTHY = {"1", "true", "yes", "y"}
_FALSY = {"0", "false", "no", "n", ""}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Resolved settings for one run."""

    engine: str = "node"
    mode: Mode = Mode.VALIDATE
    quiet: bool = False
    warn_only: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from a config mapping, validating every field."""
        defaults = cls()

        engine = data.get("engine", defaults.engine)
        if not isinstance(engine, str) or not engine:
            raise ConfigError("'engine' must be a non-empty string")

        quiet = data.get("quiet", defaults.quiet)
        if not isinstance(quiet, bool):
            raise ConfigError("'quiet' must be a boolean")

        warn_only = data.get("warnOnly", defaults.warn_only)
        if not isinstance(warn_only, bool):
            raise ConfigError("'warnOnly' must be a boolean")

        return cls(
            engine=engine,
            mode=_coerce_mode(data.get("mode", defaults.mode)),
            quiet=quiet,
            warn_only=warn_only,
            log_level=_coerce_level(data.get("logLevel", defaults.log_level)),
        )

    def merged(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "mode" in changes:
            changes["mode"] = _coerce_mode(changes["mode"])
        if "log_level" in changes:
            changes["log_level"] = _coerce_level(changes["log_level"])
        return dataclasses.replace(self, **changes)


def _coerce_mode(value: Any) -> Mode:
    try:
        return Mode(value)
    except ValueError as exc:
        known = ", ".join(m.value for m in Mode)
        raise ConfigError(f"Unknown mode {value!r}. Known modes: {known}") from exc


def _coerce_level(value: Any) -> str:
    if not isinstance(value, str) or value.strip().upper() not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level {value!r}. Known levels: {', '.join(LOG_LEVELS)}")
    return value.strip().upper()


def _coerce_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be one of {', '.join(sorted(_TRUTHY | _FALSY - {''}))}")


def _resolve_config_path(path: Path | str | None, root: Path | None) -> Path | None:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. ENGINES_CHECK_CONFIG environment variable
    3. .engines-check.json in the project root, when present
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    candidate = (root or Path(".")) / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return candidate
    return None


def _read_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    env = os.environ

    if env.get(f"{ENV_PREFIX}ENGINE"):
        overrides["engine"] = env[f"{ENV_PREFIX}ENGINE"].strip()
    if env.get(f"{ENV_PREFIX}MODE"):
        overrides["mode"] = env[f"{ENV_PREFIX}MODE"].strip()
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        overrides["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
    for key, field_name in (("QUIET", "quiet"), ("WARN_ONLY", "warn_only")):
        raw = env.get(f"{ENV_PREFIX}{key}")
        if raw is not None:
            overrides[field_name] = _coerce_flag(f"{ENV_PREFIX}{key}", raw)

    return overrides


def load_settings(path: Path | str | None = None, root: Path | None = None) -> Settings:
    """Load settings from the config file (if any) and the environment.

    Args:
        path: Optional path to the config file. If not provided, uses the
            ENGINES_CHECK_CONFIG env var or ``<root>/.engines-check.json``.
        root: Directory searched for the default config file.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path = _resolve_config_path(path, root)
    settings = Settings.from_dict(_read_config(config_path)) if config_path else Settings()
    return settings.merged(**_env_overrides())
