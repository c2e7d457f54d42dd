"""Value types of the semver range algebra and the lockfiles it reads."""

from __future__ import annotations

from .comparator import NULL_VERSION, Comparator, Operator
from .lock_entry import LockEntry
from .range import Clause, Range

__all__ = [
    "NULL_VERSION",
    "Clause",
    "Comparator",
    "LockEntry",
    "Operator",
    "Range",
]
