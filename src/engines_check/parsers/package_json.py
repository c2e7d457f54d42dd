"""Parse package.json and extract the declared engine ranges."""

from __future__ import annotations

from pathlib import Path
from typing import Any


def engines_from(data: Any) -> dict[str, str]:
    """Return the string-valued entries of a manifest's ``engines`` object."""
    if not isinstance(data, dict):
        return {}
    engines = data.get("engines")
    if not isinstance(engines, dict):
        return {}
    return {str(name): value for name, value in engines.items() if isinstance(value, str)}


def loads(text: str) -> dict[str, str]:
    import json

    return engines_from(json.loads(text))


def parse(path: Path) -> dict[str, str]:
    """Return mapping of engine name -> range expression from ``engines``."""
    return loads(path.read_text(encoding="utf-8"))
