"""Human-readable summary rendering for $GITHUB_STEP_SUMMARY."""

from __future__ import annotations

from typing import Any


def _cell(value: Any) -> str:
    """Table cell text; "||" in ranges must not open new columns."""
    if value is None:
        return ""
    return str(value).replace("|", "\\|")


def _validate_rows(path: str, proj: dict[str, Any]) -> list[str]:
    declared = _cell(proj.get("declared"))
    findings = proj.get("findings") or []
    if not findings:
        return [f"| {path} | {declared} | All dependencies compatible | n/a |"]
    return [
        f"| {path} | {declared} | {_cell(f.get('package'))}@{_cell(f.get('installed'))} "
        f"| {_cell(f.get('requires'))} |"
        for f in findings
    ]


def _limits_row(path: str, proj: dict[str, Any]) -> str:
    limits = proj.get("limits") or {}
    conflict = limits.get("conflict")
    if conflict:
        culprit = f"{_cell(conflict.get('package'))}@{_cell(conflict.get('installed'))}"
        return f"| {path} | no compatible version | {culprit} requires {_cell(conflict.get('requires'))} |"
    return f"| {path} | {_cell(limits.get('simplified'))} | n/a |"


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and a table per project."""
    totals = report.get("totals", {})
    projects = report.get("projects", [])
    engine = report.get("engine", "node")
    find_limits = report.get("mode") == "find-limits"

    lines = []
    lines.append(f"# engines-check Summary ({engine})")
    lines.append("")
    lines.append(
        f"Total projects: {totals.get('projects', 0)} | Findings: {totals.get('findings', 0)}"
        f" | Conflicts: {totals.get('conflicts', 0)} | Errors: {totals.get('errors', 0)}"
    )
    lines.append("")
    if find_limits:
        lines.append("| Project | Compatible range | Conflict |")
        lines.append("| --- | --- | --- |")
    else:
        lines.append("| Project | Declared | Package | Requires |")
        lines.append("| --- | --- | --- | --- |")

    for proj in projects:
        path = _cell(proj.get("path")) or "(unknown project)"
        if proj.get("error"):
            filler = " | n/a" if find_limits else " | n/a | n/a"
            lines.append(f"| {path} | error: {_cell(proj['error'])}{filler} |")
        elif find_limits:
            lines.append(_limits_row(path, proj))
        else:
            lines.extend(_validate_rows(path, proj))

    if not projects:
        filler = "n/a | n/a" if find_limits else "n/a | n/a | n/a"
        lines.append(f"| (no projects checked) | {filler} |")

    return "\n".join(lines) + "\n"
