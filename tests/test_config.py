import json

import pytest

from engines_check.config import ConfigError, Settings, load_settings
from engines_check.core import Mode


def _write(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def test_defaults_without_config():
    assert load_settings() == Settings()
    assert Settings().engine == "node"
    assert Settings().mode is Mode.VALIDATE


def test_explicit_file(tmp_path):
    path = _write(
        tmp_path / "custom.json",
        {"engine": "npm", "mode": "find-limits", "quiet": True, "warnOnly": True, "logLevel": "debug"},
    )
    assert load_settings(path) == Settings(
        engine="npm", mode=Mode.FIND_LIMITS, quiet=True, warn_only=True, log_level="DEBUG"
    )


def test_default_file_in_root(tmp_path):
    project = tmp_path / "repo"
    project.mkdir()
    _write(project / ".engines-check.json", {"engine": "pnpm"})
    assert load_settings(root=project).engine == "pnpm"
    # the working directory is used when no root is given
    assert load_settings().engine == "node"


def test_env_path(tmp_path, monkeypatch):
    path = _write(tmp_path / "from-env.json", {"mode": "find-limits"})
    monkeypatch.setenv("ENGINES_CHECK_CONFIG", str(path))
    assert load_settings().mode is Mode.FIND_LIMITS


def test_env_overrides_file(tmp_path, monkeypatch):
    path = _write(tmp_path / "config.json", {"engine": "npm", "quiet": False})
    monkeypatch.setenv("ENGINES_CHECK_ENGINE", "yarn")
    monkeypatch.setenv("ENGINES_CHECK_QUIET", "yes")
    monkeypatch.setenv("ENGINES_CHECK_WARN_ONLY", "0")
    monkeypatch.setenv("ENGINES_CHECK_LOG_LEVEL", "info")
    settings = load_settings(path)
    assert settings.engine == "yarn"
    assert settings.quiet is True
    assert settings.warn_only is False
    assert settings.log_level == "INFO"


def test_merged_ignores_none():
    settings = Settings(engine="npm").merged(engine=None, mode="find-limits", quiet=None)
    assert settings == Settings(engine="npm", mode=Mode.FIND_LIMITS)


@pytest.mark.parametrize(
    "data,message",
    [
        ("{", "Invalid JSON"),
        ("[]", "must be a JSON object"),
        ({"engine": ""}, "'engine' must be a non-empty string"),
        ({"quiet": "yes"}, "'quiet' must be a boolean"),
        ({"warnOnly": 1}, "'warnOnly' must be a boolean"),
        ({"mode": "audit"}, "Unknown mode"),
        ({"logLevel": "LOUD"}, "Invalid log level"),
    ],
)
def test_invalid_config(tmp_path, data, message):
    path = _write(tmp_path / "config.json", data)
    with pytest.raises(ConfigError, match=message):
        load_settings(path)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "nope.json")


def test_invalid_env_flag(monkeypatch):
    monkeypatch.setenv("ENGINES_CHECK_QUIET", "maybe")
    with pytest.raises(ConfigError, match="ENGINES_CHECK_QUIET"):
        load_settings()


def test_invalid_env_mode(monkeypatch):
    monkeypatch.setenv("ENGINES_CHECK_MODE", "audit")
    with pytest.raises(ConfigError, match="Unknown mode"):
        load_settings()
