"""Clause (conjunction) and Range (disjunction) models."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from semver import Version

from .comparator import Comparator


def _coerce_version(version: Version | str) -> Version:
    if isinstance(version, Version):
        return version
    return Version.parse(version.strip().lstrip("=v"))


@dataclass(frozen=True)
class Clause:
    """Versions satisfying every comparator of the clause."""

    comparators: tuple[Comparator, ...]

    def __post_init__(self) -> None:
        if not self.comparators:
            raise ValueError("A clause must hold at least one comparator")

    @classmethod
    def of(cls, *comparators: Comparator) -> Clause:
        return cls(comparators=tuple(comparators))

    @classmethod
    def any(cls) -> Clause:
        return cls.of(Comparator.any())

    @property
    def is_any(self) -> bool:
        return all(comparator.is_any for comparator in self.comparators)

    @property
    def is_null_set(self) -> bool:
        return any(comparator.is_null_set for comparator in self.comparators)

    def test(self, version: Version | str, include_prerelease: bool = False) -> bool:
        """Return True if ``version`` satisfies all comparators.

        Like npm, a prerelease version is only accepted when some comparator of
        the clause carries a prerelease on the same major.minor.patch, unless
        ``include_prerelease`` asks for plain interval semantics.
        """
        version = _coerce_version(version)
        if not all(comparator.test(version) for comparator in self.comparators):
            return False
        if not version.prerelease or include_prerelease:
            return True
        for comparator in self.comparators:
            bound = comparator.version
            if bound is None or not bound.prerelease:
                continue
            if (bound.major, bound.minor, bound.patch) == (
                version.major,
                version.minor,
                version.patch,
            ):
                return True
        return False

    def __iter__(self) -> Iterator[Comparator]:
        return iter(self.comparators)

    def __len__(self) -> int:
        return len(self.comparators)

    def __str__(self) -> str:
        if self.is_any:
            return "*"
        return " ".join(str(c) for c in self.comparators if not c.is_any)


@dataclass(frozen=True)
class Range:
    """Versions satisfying at least one clause of the range."""

    clauses: tuple[Clause, ...]

    def __post_init__(self) -> None:
        if not self.clauses:
            raise ValueError("A range must hold at least one clause")

    @classmethod
    def of(cls, *clauses: Clause) -> Range:
        return cls(clauses=tuple(clauses))

    @classmethod
    def any(cls) -> Range:
        return cls.of(Clause.any())

    def test(self, version: Version | str, include_prerelease: bool = False) -> bool:
        version = _coerce_version(version)
        return any(clause.test(version, include_prerelease) for clause in self.clauses)

    def __iter__(self) -> Iterator[Clause]:
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)

    def __str__(self) -> str:
        return " || ".join(str(clause) for clause in self.clauses)
