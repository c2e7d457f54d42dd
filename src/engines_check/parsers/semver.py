"""npm semver range grammar built atop python-semver.

Supported expressions:
- exact versions and partials ("1.2.3", "=1.2.3", "v1.2.3", "1.2", "1.x")
- primitive comparators (">=1.0.0", "<2", "> 1.2")
- caret ranges ^x.y.z → >=x.y.z <x+1.0.0-0 (zero majors narrow further)
- tilde ranges ~x.y.z (and ~>x.y.z) → >=x.y.z <x.y+1.0-0
- hyphen ranges "1.2.3 - 2.3.4" → >=1.2.3 <=2.3.4
- comparators split by spaces form a clause, "||" separates clauses
- "", "*" and "x" match any version
"""

from __future__ import annotations

import re
from typing import NamedTuple

from semver import Version

from ..models import Clause, Comparator, Operator, Range


class InvalidRangeError(ValueError):
    """Raised when text is not a valid semver version, comparator or range."""


_WILDCARDS = {"x", "X", "*"}

_IDENTIFIERS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_PARTIAL = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*])"
    r"(?:\.(?P<patch>\d+|[xX*])"
    rf"(?:-(?P<prerelease>{_IDENTIFIERS}))?"
    rf"(?:\+(?P<build>{_IDENTIFIERS}))?"
    r")?)?$"
)
_TOKEN = re.compile(r"^(?P<op><=|>=|<|>|=|~>|~|\^)?(?P<rest>.*)$")
_HYPHEN = re.compile(r"^(?P<start>\S+)\s+-\s+(?P<end>\S+)$")
_OPERATOR_GAP = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")


class _Partial(NamedTuple):
    """A possibly incomplete version; ``None`` parts are wildcards."""

    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None
    build: str | None

    @property
    def is_complete(self) -> bool:
        return self.patch is not None

    def version(self) -> Version:
        return Version(
            self.major or 0,
            self.minor or 0,
            self.patch or 0,
            prerelease=self.prerelease,
            build=self.build,
        )


def _parse_partial(text: str) -> _Partial:
    match = _PARTIAL.match(text)
    if match is None:
        raise InvalidRangeError(f"Invalid version: {text!r}")

    parts: list[int | None] = []
    for name in ("major", "minor", "patch"):
        value = match.group(name)
        # Everything after a wildcard is a wildcard as well
        if value is None or value in _WILDCARDS or (parts and parts[-1] is None):
            parts.append(None)
        else:
            parts.append(int(value))

    major, minor, patch = parts
    if patch is None:
        return _Partial(major, minor, None, None, None)
    return _Partial(major, minor, patch, match.group("prerelease"), match.group("build"))


def _gte(major: int, minor: int = 0, patch: int = 0, prerelease: str | None = None) -> Comparator:
    return Comparator(Operator.GTE, Version(major, minor, patch, prerelease=prerelease))


def _below(major: int, minor: int = 0, patch: int = 0) -> Comparator:
    """Exclusive upper bound that also shuts out the bound's own prereleases."""
    return Comparator(Operator.LT, Version(major, minor, patch, prerelease="0"))


def _caret(p: _Partial) -> list[Comparator]:
    if p.major is None:
        return [Comparator.any()]
    if p.minor is None:
        return [_gte(p.major), _below(p.major + 1)]
    if p.patch is None:
        if p.major == 0:
            return [_gte(0, p.minor), _below(0, p.minor + 1)]
        return [_gte(p.major, p.minor), _below(p.major + 1)]

    lower = Comparator(Operator.GTE, p.version())
    if p.major != 0:
        return [lower, _below(p.major + 1)]
    if p.minor != 0:
        return [lower, _below(0, p.minor + 1)]
    return [lower, _below(0, 0, p.patch + 1)]


def _tilde(p: _Partial) -> list[Comparator]:
    if p.major is None:
        return [Comparator.any()]
    if p.minor is None:
        return [_gte(p.major), _below(p.major + 1)]
    if p.patch is None:
        return [_gte(p.major, p.minor), _below(p.major, p.minor + 1)]
    return [Comparator(Operator.GTE, p.version()), _below(p.major, p.minor + 1)]


def _primitive(symbol: str, p: _Partial) -> list[Comparator]:
    if p.is_complete:
        return [Comparator(Operator.from_symbol(symbol), p.version())]

    if symbol == "=":
        symbol = ""
    if p.major is None:
        # ">*" and "<*" can never match
        if symbol in (">", "<"):
            return [Comparator.null_set()]
        return [Comparator.any()]

    if not symbol:
        if p.minor is None:
            return [_gte(p.major), _below(p.major + 1)]
        return [_gte(p.major, p.minor), _below(p.major, p.minor + 1)]

    major, minor = p.major, p.minor or 0
    if symbol == ">":
        symbol = ">="
        if p.minor is None:
            major, minor = major + 1, 0
        else:
            minor += 1
    elif symbol == "<=":
        symbol = "<"
        if p.minor is None:
            major += 1
        else:
            minor += 1

    if symbol == "<":
        return [_below(major, minor)]
    return [_gte(major, minor)]


def _hyphen(start: str, end: str) -> list[Comparator]:
    low = _parse_partial(start)
    high = _parse_partial(end)
    comparators: list[Comparator] = []

    if low.major is not None:
        if low.is_complete:
            comparators.append(Comparator(Operator.GTE, low.version()))
        else:
            comparators.append(_gte(low.major, low.minor or 0))

    if high.major is not None:
        if high.minor is None:
            comparators.append(_below(high.major + 1))
        elif high.patch is None:
            comparators.append(_below(high.major, high.minor + 1))
        else:
            comparators.append(Comparator(Operator.LTE, high.version()))

    return comparators or [Comparator.any()]


def _parse_token(token: str) -> list[Comparator]:
    match = _TOKEN.match(token)
    assert match is not None  # the pattern accepts any string
    symbol = match.group("op") or ""
    partial = _parse_partial(match.group("rest"))
    if symbol == "^":
        return _caret(partial)
    if symbol in ("~", "~>"):
        return _tilde(partial)
    return _primitive(symbol, partial)


def parse_version(text: str) -> Version:
    """Parse a single, complete version such as "1.2.3" or "v1.2.3-beta.1"."""
    cleaned = text.strip()
    if cleaned.startswith("="):
        cleaned = cleaned[1:].lstrip()
    partial = _parse_partial(cleaned)
    if not partial.is_complete:
        raise InvalidRangeError(f"Incomplete version: {text!r}")
    return partial.version()


def parse_comparator(text: str) -> Comparator:
    """Parse one primitive comparator such as ">=1.2.3" or "*"."""
    comparators = _parse_token(_OPERATOR_GAP.sub(r"\1", text.strip()))
    if len(comparators) != 1:
        raise InvalidRangeError(f"Not a single comparator: {text!r}")
    return comparators[0]


def parse_clause(text: str) -> Clause:
    """Parse a whitespace-separated conjunction of comparators."""
    text = text.strip()
    hyphen = _HYPHEN.match(text)
    if hyphen:
        comparators = _hyphen(hyphen.group("start"), hyphen.group("end"))
    else:
        tokens = _OPERATOR_GAP.sub(r"\1", text).split()
        comparators = [c for token in tokens for c in _parse_token(token)]

    if any(c.is_null_set for c in comparators):
        return Clause.of(Comparator.null_set())
    concrete = [c for c in comparators if not c.is_any]
    if not concrete:
        return Clause.any()
    return Clause(tuple(concrete))


def parse_range(text: str) -> Range:
    """Parse a full range expression; an empty string means any version."""
    if not isinstance(text, str):
        raise InvalidRangeError(f"Range must be a string, got {type(text).__name__}")
    clauses = [parse_clause(part) for part in text.split("||")]
    satisfiable = [clause for clause in clauses if not clause.is_null_set]
    return Range(tuple(satisfiable or clauses[:1]))


def valid_range(text: str) -> bool:
    try:
        parse_range(text)
    except InvalidRangeError:
        return False
    return True


def satisfies(installed: str, expr: str, include_prerelease: bool = False) -> bool:
    try:
        version = parse_version(installed)
    except InvalidRangeError:
        return False
    return parse_range(expr).test(version, include_prerelease)
