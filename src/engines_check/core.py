"""Core engine-compatibility checks.

This module MUST NOT contain CLI-specific code so it can be used both by the
console entrypoint and as a library.

Two modes are supported:

- ``validate``: every dependency's ``engines`` range must contain the range the
  project itself declares in package.json.
- ``find-limits``: intersect every dependency's ``engines`` range to find the
  widest engine range all of them accept.
"""

from __future__ import annotations

import enum
import json
from pathlib import Path
from typing import Any

import requests
import yaml
from tenacity import retry, stop_after_attempt, wait_fixed

from .discovery import LOCKFILE_NAMES, discover_projects, find_lockfile
from .intersection import fold_intersection
from .logger import logger
from .models import LockEntry, Range
from .parsers import package_json, package_lock, pnpm_lock
from .parsers.package_lock import UnsupportedLockfileError
from .parsers.semver import InvalidRangeError, parse_range
from .report import aggregate
from .simplify import simplify
from .subset import is_subset


class Mode(str, enum.Enum):
    VALIDATE = "validate"
    FIND_LIMITS = "find-limits"


class ManifestError(RuntimeError):
    """Raised when a manifest or lockfile cannot be used for the check."""


Source = str | Path


def _is_url(source: Source) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def _basename(source: Source) -> str:
    if _is_url(source):
        return str(source).split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return Path(source).name


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> str:  # pragma: no cover - patched in tests
    r = requests.get(url, timeout=10)
    r.raise_for_status()
    return r.text


def _read_source(source: Source) -> str:
    if _is_url(source):
        try:
            return _http_get(str(source))
        except requests.RequestException as exc:
            raise ManifestError(f"Failed to fetch {source}: {exc}") from exc
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Failed to read {source}: {exc}") from exc


def load_declared_engines(package: Source) -> dict[str, str]:
    """Return the ``engines`` mapping of a package.json path or URL."""
    try:
        return package_json.loads(_read_source(package))
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON in {package}: {exc}") from exc


def load_lock_entries(lockfile: Source) -> list[LockEntry]:
    """Return the resolved dependencies of a package-lock.json or pnpm-lock.yaml."""
    name = _basename(lockfile)
    text = _read_source(lockfile)
    try:
        if name.endswith((".yaml", ".yml")):
            return pnpm_lock.loads(text)
        return package_lock.loads(text)
    except UnsupportedLockfileError as exc:
        raise ManifestError(str(exc)) from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"Invalid lockfile {lockfile}: {exc}") from exc


def _declared_range(package: Source, engine: str, required: bool) -> Range | None:
    declared = load_declared_engines(package).get(engine)
    if declared is None:
        if required:
            raise ManifestError(f"No engines.{engine} is present in {package}.")
        return None
    try:
        return parse_range(declared)
    except InvalidRangeError as exc:
        raise ManifestError(
            f'engines.{engine} "{declared}" is not a valid semver range.'
        ) from exc


def _dependency_ranges(
    entries: list[LockEntry], engine: str, skipped: list[str]
) -> list[tuple[LockEntry, str, Range]]:
    ranges: list[tuple[LockEntry, str, Range]] = []
    for entry in entries:
        expr = entry.engines.get(engine)
        if not expr:
            continue
        try:
            ranges.append((entry, expr, parse_range(expr)))
        except InvalidRangeError:
            logger.warning("Skipping %s: invalid %s range %r", entry.label, engine, expr)
            skipped.append(f'{entry.label}: invalid {engine} range "{expr}"')
    return ranges


def _validate(
    declared: Range, dependencies: list[tuple[LockEntry, str, Range]], engine: str
) -> list[dict[str, Any]]:
    findings: list[dict[str, Any]] = []
    for entry, expr, required in dependencies:
        if is_subset(declared, required):
            continue
        findings.append(
            {
                "package": entry.name,
                "installed": entry.version,
                "requires": expr,
                "message": f'{entry.label} requires {engine} "{expr}".',
            }
        )
    return findings


def _find_limits(
    declared: Range | None, dependencies: list[tuple[LockEntry, str, Range]]
) -> dict[str, Any]:
    result, failed = fold_intersection((required for _, _, required in dependencies), seed=declared)
    if result is None:
        entry, expr, _ = dependencies[failed]
        logger.info("%s requires %r, leaving no compatible version", entry.label, expr)
        return {
            "range": None,
            "simplified": None,
            "conflict": {"package": entry.name, "installed": entry.version, "requires": expr},
        }
    rendered = str(result)
    return {"range": rendered, "simplified": simplify(rendered), "conflict": None}


def check_project(
    package: Source,
    lockfile: Source | None = None,
    engine: str = "node",
    mode: Mode = Mode.VALIDATE,
    label: str | None = None,
) -> dict[str, Any]:
    """Check one project and return its report entry.

    Params:
        package: path or URL of package.json
        lockfile: path or URL of package-lock.json / pnpm-lock.yaml; when None
            it is looked up next to a local package.json
        engine: key of the ``engines`` object to check (e.g. "node", "npm")
        mode: validate the declared range or find the feasible limits

    Raises ManifestError when the inputs cannot be used at all.
    """
    mode = Mode(mode)
    if lockfile is None:
        if _is_url(package):
            raise ManifestError("A lockfile location is required when package.json is a URL")
        lockfile = find_lockfile(Path(package).parent)
        if lockfile is None:
            names = ", ".join(LOCKFILE_NAMES)
            raise ManifestError(f"No lockfile ({names}) found next to {package}")

    declared = _declared_range(package, engine, required=mode is Mode.VALIDATE)
    skipped: list[str] = []
    dependencies = _dependency_ranges(load_lock_entries(lockfile), engine, skipped)
    logger.info("%s: %d dependencies declare engines.%s", lockfile, len(dependencies), engine)

    project: dict[str, Any] = {
        "path": label if label is not None else str(package),
        "lockfile": str(lockfile),
        "declared": str(declared) if declared is not None else None,
        "findings": [],
        "skipped": skipped,
        "limits": None,
    }
    if mode is Mode.VALIDATE:
        assert declared is not None
        project["findings"] = _validate(declared, dependencies, engine)
    else:
        project["limits"] = _find_limits(declared, dependencies)
    return project


def check_repository(
    root: Path,
    engine: str = "node",
    mode: Mode = Mode.VALIDATE,
) -> dict[str, Any]:
    """Check every project found under ``root`` and aggregate one report."""
    root = root.resolve()
    mode = Mode(mode)

    projects: list[dict[str, Any]] = []
    for project_dir, lockfile in discover_projects(root):
        label = str(project_dir.relative_to(root)) or "."
        try:
            projects.append(
                check_project(
                    project_dir / "package.json",
                    lockfile,
                    engine=engine,
                    mode=mode,
                    label=label,
                )
            )
        except ManifestError as exc:
            logger.warning("%s: %s", label, exc)
            projects.append(
                {
                    "path": label,
                    "lockfile": str(lockfile),
                    "declared": None,
                    "findings": [],
                    "skipped": [],
                    "limits": None,
                    "error": str(exc),
                }
            )

    return aggregate(projects, mode=mode.value, engine=engine)
