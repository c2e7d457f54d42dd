"""engines-check core package.

Semver range algebra (intersection, containment, caret/tilde rendering) and
the checks that compare a project's ``engines`` field with its lockfile.
"""

from .intersection import fold_intersection, intersect, intersect_all, union
from .parsers.semver import InvalidRangeError, parse_range, satisfies
from .simplify import simplify
from .subset import is_subset

__all__ = [
    "InvalidRangeError",
    "fold_intersection",
    "intersect",
    "intersect_all",
    "is_subset",
    "parse_range",
    "satisfies",
    "simplify",
    "union",
]
