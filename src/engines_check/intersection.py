"""Set intersection of semver ranges.

A range is a disjunction of clauses and a clause is a conjunction of
comparators. Intersecting two ranges distributes over both disjunctions: every
clause pair is reduced to at most one interval by folding its lower bounds,
upper bounds and exact matches separately, and the surviving clauses are
joined back into one range.

``None`` stands for "no version satisfies both operands". It is an ordinary
result and is never raised.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeAlias

from semver import Version

from .logger import logger
from .models import Clause, Comparator, Operator, Range
from .parsers.semver import parse_range

RangeLike: TypeAlias = "Range | Clause | Comparator | str"

_LOWER = (Operator.GT, Operator.GTE)
_UPPER = (Operator.LT, Operator.LTE)


class IntersectionInvariantError(RuntimeError):
    """Raised when the algebra would build a clause that contradicts itself."""


def _bounded(lower: Comparator, upper: Comparator) -> Clause:
    if not (lower.is_lower_bound and upper.is_upper_bound and lower.version < upper.version):
        raise IntersectionInvariantError(
            f"Refusing to build clause '{lower} {upper}': bounds are not ordered"
        )
    return Clause.of(lower, upper)


def _successor(version: Version) -> Version:
    """The smallest version that sorts above ``version``."""
    if version.prerelease:
        return version.replace(prerelease=f"{version.prerelease}.0", build=None)
    return version.bump_patch().replace(prerelease="0")


def _tighter(a: Comparator, b: Comparator) -> Comparator:
    """Of two bounds pointing the same way, return the one that excludes more."""
    if b.operator.inclusive:
        return b if a.test(b.version) else a
    return a if b.test(a.version) else b


def intersect_comparators(a: Comparator, b: Comparator) -> Clause | None:
    """Intersect two single comparators.

    The result is a one-comparator clause (a bound or an exact match), a
    two-comparator ``lower upper`` clause, or ``None`` when nothing matches both.
    """
    match (a.operator, b.operator):
        case (Operator.ANY, _):
            return Clause.of(b)
        case (_, Operator.ANY):
            return Clause.of(a)
        case (Operator.EQ, _):
            return Clause.of(a) if b.test(a.version) else None
        case (_, Operator.EQ):
            return Clause.of(b) if a.test(b.version) else None
        case (Operator.GT | Operator.GTE, Operator.GT | Operator.GTE) | (
            Operator.LT | Operator.LTE,
            Operator.LT | Operator.LTE,
        ):
            return Clause.of(_tighter(a, b))
        case (Operator.GTE, Operator.LTE) | (Operator.LTE, Operator.GTE) if a.version == b.version:
            return Clause.of(Comparator(Operator.EQ, a.version))

    lower, upper = (a, b) if a.operator in _LOWER else (b, a)
    if lower.version >= upper.version:
        return None
    if lower.operator is Operator.GT and upper.operator is Operator.LT:
        # nothing lies strictly between a version and its successor
        if upper.version == _successor(lower.version):
            return None
    return _bounded(lower, upper)


def _sole(clause: Clause) -> Comparator:
    if len(clause) != 1:
        raise IntersectionInvariantError(f"Expected a single comparator, got '{clause}'")
    return clause.comparators[0]


def _fold(comparators: Iterable[Comparator]) -> Clause | None:
    folded = Clause.any()
    for comparator in comparators:
        result = intersect_comparators(_sole(folded), comparator)
        if result is None:
            return None
        folded = result
    return folded


def reduce_clauses(first: Clause, second: Clause) -> Clause | None:
    """Intersect two clauses into a single clause, or ``None``."""
    lower_bounds: list[Comparator] = []
    upper_bounds: list[Comparator] = []
    others: list[Comparator] = []

    for comparator in (*first, *second):
        if comparator.is_null_set:
            return None
        if comparator.operator in _LOWER:
            lower_bounds.append(comparator)
        elif comparator.operator in _UPPER:
            upper_bounds.append(comparator)
        else:
            others.append(comparator)

    lower = _fold(lower_bounds)
    if lower is None:
        return None
    upper = _fold(upper_bounds)
    if upper is None:
        return None
    exact_or_any = _fold(others)
    if exact_or_any is None:
        return None

    if not exact_or_any.is_any:
        # only one version can match
        version = _sole(exact_or_any).version
        if lower.test(version, include_prerelease=True) and upper.test(
            version, include_prerelease=True
        ):
            return exact_or_any
        return None

    return intersect_comparators(_sole(lower), _sole(upper))


def _as_range(value: RangeLike | None) -> Range | None:
    if value is None or isinstance(value, Range):
        return value
    if isinstance(value, Clause):
        return Range.of(value)
    if isinstance(value, Comparator):
        return Range.of(Clause.of(value))
    return parse_range(value)


def union(a: RangeLike | None, b: RangeLike | None) -> Range | None:
    """Join two results into one range; ``None`` contributes no clauses.

    Overlapping clauses are kept as they are; the result is correct but not
    necessarily minimal.
    """
    left = _as_range(a)
    right = _as_range(b)
    if left is None:
        return right
    if right is None:
        return left
    return Range(left.clauses + right.clauses)


def intersect_ranges(a: Range, b: Range) -> Range | None:
    result: Range | None = None
    for left in a:
        for right in b:
            result = union(result, reduce_clauses(left, right))
    return result


def intersect(a: RangeLike, b: RangeLike) -> Range | None:
    """Return the intersection of ``a`` and ``b``, or ``None`` if there's no overlap.

    The result is exact for interval membership, i.e. ``test(v,
    include_prerelease=True)``. npm's default prerelease filter depends on
    which comparators carry prerelease tags, so a prerelease version may be
    accepted by the result while one operand's default ``test`` rejects it:
    ``intersect(">=1.0.0-beta", "<2.0.0")`` admits ``1.0.0-rc``. Release
    versions are unaffected.
    """
    if isinstance(a, Comparator) and isinstance(b, Comparator):
        return _as_range(intersect_comparators(a, b))
    return intersect_ranges(_as_range(a), _as_range(b))


def fold_intersection(
    ranges: Iterable[RangeLike], seed: RangeLike | None = None
) -> tuple[Range | None, int | None]:
    """Intersect ``ranges`` left to right, starting from ``seed`` (any by default).

    Returns ``(result, None)``, or ``(None, index)`` where ``index`` is the
    position of the input that emptied the result. Inputs after it are not
    consumed.
    """
    result = _as_range(seed) if seed is not None else Range.any()
    for index, item in enumerate(ranges):
        step = intersect(result, item)
        logger.debug("intersection step %d: %s & %s -> %s", index, result, item, step)
        if step is None:
            return None, index
        result = step
    return result, None


def intersect_all(ranges: Iterable[RangeLike]) -> Range | None:
    """Intersect every range in order, stopping at the first empty result."""
    return fold_intersection(ranges)[0]
