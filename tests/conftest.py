import json
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep user configuration and CI variables out of every test."""
    for name in (
        "ENGINES_CHECK_CONFIG",
        "ENGINES_CHECK_ENGINE",
        "ENGINES_CHECK_MODE",
        "ENGINES_CHECK_QUIET",
        "ENGINES_CHECK_WARN_ONLY",
        "ENGINES_CHECK_LOG_LEVEL",
        "GITHUB_STEP_SUMMARY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_project(tmp_path):
    """Write a package.json plus package-lock.json and return the project dir.

    ``packages`` maps a lockfile name (nested names use "a/node_modules/b") to
    ``(version, engines)``; ``engines`` may be None to omit the field.
    """

    def _make(
        engines: dict | None = None,
        packages: dict | None = None,
        lockfile_version: int = 3,
        directory: str | None = None,
    ) -> Path:
        root = tmp_path / directory if directory else tmp_path
        root.mkdir(parents=True, exist_ok=True)

        manifest: dict = {"name": "demo", "version": "1.0.0"}
        if engines is not None:
            manifest["engines"] = engines
        (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")

        lock_packages: dict = {"": {"name": "demo", "version": "1.0.0"}}
        for name, (version, dep_engines) in (packages or {}).items():
            meta: dict = {"version": version}
            if dep_engines is not None:
                meta["engines"] = dep_engines
            lock_packages[f"node_modules/{name}"] = meta
        lockfile = {"name": "demo", "lockfileVersion": lockfile_version, "packages": lock_packages}
        (root / "package-lock.json").write_text(json.dumps(lockfile), encoding="utf-8")
        return root

    return _make
