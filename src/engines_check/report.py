"""Report aggregation and schema-friendly output."""

from __future__ import annotations

from typing import Any

REPORT_VERSION = "1"


def _project_failed(project: dict[str, Any]) -> bool:
    if project.get("error") or project.get("findings"):
        return True
    limits = project.get("limits")
    return bool(limits and limits.get("conflict"))


def aggregate(projects: list[dict[str, Any]], mode: str, engine: str) -> dict[str, Any]:
    """Aggregate per-project results into a single schema-compatible report.

    Each entry of ``projects`` carries ``path``, ``findings`` (validate mode)
    and ``limits`` (find-limits mode). A project counts as failing when it has
    findings, when its limits ran into a conflict, or when it could not be
    checked at all (``error``).
    """

    total_findings = sum(len(p.get("findings", [])) for p in projects)
    conflicts = sum(1 for p in projects if (p.get("limits") or {}).get("conflict"))
    errors = sum(1 for p in projects if p.get("error"))

    report: dict[str, Any] = {
        "version": REPORT_VERSION,
        "mode": mode,
        "engine": engine,
        "hasFindings": any(_project_failed(p) for p in projects),
        "projects": projects,
        "totals": {
            "projects": len(projects),
            "findings": total_findings,
            "conflicts": conflicts,
            "errors": errors,
        },
    }

    return report
