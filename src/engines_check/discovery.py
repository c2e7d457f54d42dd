"""Project and lockfile discovery utilities."""

from __future__ import annotations

from pathlib import Path


EXCLUDES = {"node_modules", ".git", ".venv"}

# Checked in order; the first one present wins
LOCKFILE_NAMES = ("package-lock.json", "pnpm-lock.yaml")


def find_lockfile(project_dir: Path) -> Path | None:
    """Return the supported lockfile next to a package.json, if any."""
    for name in LOCKFILE_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def discover_projects(root: Path) -> list[tuple[Path, Path]]:
    """Find (project_dir, lockfile) pairs recursively under root.

    A project is a directory holding a package.json and one of
    ``LOCKFILE_NAMES``. Vendor directories are skipped.
    """
    root = root.resolve()
    found: list[tuple[Path, Path]] = []

    def should_skip(p: Path) -> bool:
        parts = set(p.parts)
        return any(ex in parts for ex in EXCLUDES)

    for manifest in sorted(root.rglob("package.json")):
        if not manifest.is_file():
            continue
        if should_skip(manifest.relative_to(root)):
            continue
        lockfile = find_lockfile(manifest.parent)
        if lockfile is not None:
            found.append((manifest.parent, lockfile))

    return found
