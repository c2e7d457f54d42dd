"""Comparator model: one operator paired with a version."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from semver import Version

# Nothing sorts below 0.0.0-0, so "<0.0.0-0" matches no version at all.
NULL_VERSION = Version(0, 0, 0, prerelease="0")


class Operator(enum.Enum):
    """The six comparator kinds of the range grammar."""

    ANY = ""
    EQ = "="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="

    @property
    def is_lower_bound(self) -> bool:
        return self in (Operator.GT, Operator.GTE)

    @property
    def is_upper_bound(self) -> bool:
        return self in (Operator.LT, Operator.LTE)

    @property
    def inclusive(self) -> bool:
        return self in (Operator.EQ, Operator.GTE, Operator.LTE)

    @classmethod
    def from_symbol(cls, symbol: str) -> Operator:
        """Map an operator token to its member; a bare version is an exact match."""
        if symbol in ("", "="):
            return cls.EQ
        return cls(symbol)


@dataclass(frozen=True)
class Comparator:
    """A single one-sided or exact constraint, or the "any" constraint."""

    operator: Operator
    version: Version | None = None

    def __post_init__(self) -> None:
        if (self.operator is Operator.ANY) != (self.version is None):
            raise ValueError("Only the 'any' comparator may omit its version")

    @classmethod
    def any(cls) -> Comparator:
        return cls(Operator.ANY)

    @classmethod
    def null_set(cls) -> Comparator:
        return cls(Operator.LT, NULL_VERSION)

    @property
    def is_any(self) -> bool:
        return self.operator is Operator.ANY

    @property
    def is_exact(self) -> bool:
        return self.operator is Operator.EQ

    @property
    def is_lower_bound(self) -> bool:
        return self.operator.is_lower_bound

    @property
    def is_upper_bound(self) -> bool:
        return self.operator.is_upper_bound

    @property
    def is_null_set(self) -> bool:
        return self.operator is Operator.LT and self.version == NULL_VERSION

    def test(self, version: Version) -> bool:
        """Return True if ``version`` lies on the allowed side of this bound."""
        match self.operator:
            case Operator.ANY:
                return True
            case Operator.EQ:
                return version == self.version
            case Operator.GT:
                return version > self.version
            case Operator.GTE:
                return version >= self.version
            case Operator.LT:
                return version < self.version
            case Operator.LTE:
                return version <= self.version
        raise AssertionError(f"unhandled operator {self.operator!r}")

    def __str__(self) -> str:
        if self.is_any:
            return "*"
        if self.is_exact:
            return str(self.version)
        return f"{self.operator.value}{self.version}"
