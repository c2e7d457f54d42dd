"""Range containment: is every version matched by one range matched by another?

Each clause is reduced to a single interval and the intervals of the outer
range are swept in order. Intervals are compared through "cuts": a cut sits
either just below or just above a version, or at one of the two infinities.
"""

from __future__ import annotations

from semver import Version

from .intersection import reduce_clauses
from .models import NULL_VERSION, Clause, Operator, Range

_Cut = tuple[int, "Version | None", int]

_NEG_INF: _Cut = (0, None, 0)
_POS_INF: _Cut = (2, None, 0)


def _below(version: Version) -> _Cut:
    if version == NULL_VERSION:
        return _NEG_INF
    return (1, version, 0)


def _above(version: Version) -> _Cut:
    return (1, version, 1)


def _interval(clause: Clause) -> tuple[_Cut, _Cut] | None:
    reduced = reduce_clauses(clause, Clause.any())
    if reduced is None:
        return None

    start, end = _NEG_INF, _POS_INF
    for comparator in reduced:
        version = comparator.version
        match comparator.operator:
            case Operator.EQ:
                return _below(version), _above(version)
            case Operator.GTE:
                start = _below(version)
            case Operator.GT:
                start = _above(version)
            case Operator.LTE:
                end = _above(version)
            case Operator.LT:
                end = _below(version)
            case Operator.ANY:
                pass
    if start >= end:
        return None
    return start, end


def _covered(target: tuple[_Cut, _Cut], intervals: list[tuple[_Cut, _Cut]]) -> bool:
    cursor, end = target
    for start, stop in intervals:
        if start > cursor:
            return False
        if stop > cursor:
            cursor = stop
        if cursor >= end:
            return True
    return cursor >= end


def is_subset(inner: Range, outer: Range) -> bool:
    """Return True if every version matching ``inner`` also matches ``outer``."""
    intervals = sorted(
        (interval for interval in map(_interval, outer) if interval is not None),
        key=lambda interval: interval[0],
    )
    for clause in inner:
        target = _interval(clause)
        if target is not None and not _covered(target, intervals):
            return False
    return True
