"""Lockfile entry model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LockEntry:
    """A resolved dependency and the engine ranges it declares."""

    name: str
    version: str
    engines: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must be non-empty")

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"
