"""Parse npm package-lock.json to capture the engines of resolved dependencies."""

from __future__ import annotations

from pathlib import Path

from ..models.lock_entry import LockEntry
from .package_json import engines_from


class UnsupportedLockfileError(ValueError):
    """Raised for lockfiles that predate the per-package ``engines`` data."""


def loads(text: str) -> list[LockEntry]:
    """Return lock entries from the ``packages`` map of a v2/v3 lockfile.

    v1 lockfiles only carry the ``dependencies`` tree, which has no engines.
    """
    import json

    data = json.loads(text)
    if not isinstance(data, dict):
        raise UnsupportedLockfileError("package-lock.json must contain a JSON object")

    lockfile_version = data.get("lockfileVersion")
    if not isinstance(lockfile_version, int) or lockfile_version < 2:
        raise UnsupportedLockfileError(
            "Older lockfiles don't include the engines object. "
            "Please upgrade to lockfile v2 or v3."
        )

    entries: list[LockEntry] = []
    packages = data.get("packages")
    if not isinstance(packages, dict):
        return entries

    for key, meta in packages.items():
        if not isinstance(meta, dict):
            continue
        # "node_modules/a/node_modules/b" -> "a/b"; the root project has key ""
        name = key.replace("node_modules/", "")
        if not name:
            continue
        version = meta.get("version")
        entries.append(
            LockEntry(
                name=name,
                version=str(version) if version is not None else "",
                engines=engines_from(meta),
            )
        )

    return entries


def parse(path: Path) -> list[LockEntry]:
    return loads(path.read_text(encoding="utf-8"))
