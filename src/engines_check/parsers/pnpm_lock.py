"""Parse pnpm-lock.yaml to capture the engines of resolved dependencies."""

from __future__ import annotations

from pathlib import Path

from ..models.lock_entry import LockEntry
from .package_json import engines_from


def _split_key(key: str) -> tuple[str, str] | None:
    # Keys look like "/name@1.2.3" (v6), "/@scope/name/1.2.3" (v5) or "name@1.2.3" (v9)
    ref = key[1:] if key.startswith("/") else key
    # Peer suffixes: "react-dom@18.2.0(react@18.2.0)"
    ref = ref.split("(", 1)[0]
    name, sep, version = ref.rpartition("/")
    if sep and name and version[:1].isdigit():
        # v5 peer suffixes: "1.0.0_react@18.2.0"
        return name, version.split("_", 1)[0]
    at = ref.rfind("@")
    if at <= 0:
        return None
    return ref[:at], ref[at + 1 :]


def loads(text: str) -> list[LockEntry]:
    import yaml

    data = yaml.safe_load(text) or {}
    pkgs = data.get("packages") or {}

    entries: list[LockEntry] = []
    for key, meta in pkgs.items():
        if not isinstance(key, str) or not isinstance(meta, dict):
            continue
        split = _split_key(key)
        if split is None:
            continue
        name, version = split
        version = str(meta.get("version", version))
        entries.append(LockEntry(name=name, version=version, engines=engines_from(meta)))

    return entries


def parse(path: Path) -> list[LockEntry]:
    """Return lock entries from a pnpm lock file."""
    return loads(path.read_text(encoding="utf-8"))
