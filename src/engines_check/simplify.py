"""Render an intersection back into caret/tilde shorthand where possible."""

from __future__ import annotations

import re

_BOUNDED = re.compile(
    r"^>=(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)(?P<pre>-[0-9A-Za-z.-]+)?"
    r" <(?P<up_major>\d+)\.(?P<up_minor>\d+)\.(?P<up_patch>\d+)(?:-0)?$"
)


def _simplify_clause(clause: str) -> str:
    clause = " ".join(clause.split())
    match = _BOUNDED.match(clause)
    if match is None:
        return clause

    major, minor = int(match["major"]), int(match["minor"])
    up_major, up_minor, up_patch = int(match["up_major"]), int(match["up_minor"]), int(match["up_patch"])
    base = f"{major}.{minor}.{match['patch']}{match['pre'] or ''}"

    if major >= 1 and up_major == major + 1 and up_minor == 0 and up_patch == 0:
        return f"^{base}"
    if (major, minor) != (0, 0) and up_major == major and up_minor == minor + 1 and up_patch == 0:
        return f"~{base}"
    return clause


def simplify(text: str) -> str:
    """Rewrite each clause of a rendered range into caret or tilde form.

    ``>=1.2.3 <2.0.0-0`` becomes ``^1.2.3`` and ``>=1.2.3 <1.3.0-0`` becomes
    ``~1.2.3``; anything else is left alone. Clauses are joined with " || ".
    """
    return " || ".join(_simplify_clause(clause) for clause in text.split("||"))
