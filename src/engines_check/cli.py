"""Command-line entrypoint for engines-check.

Usage:
  engines-check [--package package.json] [--lockfile package-lock.json]
                [--engine node] [--mode validate|find-limits] [--quiet]
  engines-check --root . [--format json|markdown] [--warn-only]

Exit codes: 0 when everything is compatible, 10 when findings exist (unless
warn-only), 1 when the check itself could not run.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from .config import ConfigError, Settings, load_settings
from .core import ManifestError, Mode, check_project, check_repository
from .logger import LOG_LEVELS, configure_logger
from .report import aggregate
from .summary import render_summary

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FINDINGS = 10


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="engines-check",
        description="Check dependency engine ranges against a project's engines field.",
    )
    parser.add_argument(
        "--package",
        default="./package.json",
        help="The location of package.json (path or URL)",
    )
    parser.add_argument(
        "--lockfile",
        default=None,
        help="The location of package-lock.json or pnpm-lock.yaml (path or URL); "
        "defaults to the lockfile next to package.json",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Check every project found under this directory instead of a single package",
    )
    parser.add_argument("--engine", default=None, help="Which engine to check (default: node)")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=None,
        help="validate the declared range, or find the range every dependency accepts",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=None,
        help="Don't report which packages fail",
    )
    parser.add_argument("--warn-only", action="store_true", default=None)
    parser.add_argument("--format", choices=["text", "json", "markdown"], default="text")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config file")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    return parser.parse_args(argv)


def _print_text(report: dict[str, Any], settings: Settings) -> None:
    for project in report["projects"]:
        if project.get("error"):
            print(f"{project['path']}: {project['error']}", file=sys.stderr)
        for finding in project.get("findings", []):
            if not settings.quiet:
                print(finding["message"], file=sys.stderr)
        limits = project.get("limits")
        if not limits:
            continue
        conflict = limits.get("conflict")
        if conflict is None:
            print(limits["simplified"])
        elif not settings.quiet:
            print(
                f"No {settings.engine} version satisfies every dependency: "
                f'{conflict["package"]}@{conflict["installed"]} requires '
                f'{settings.engine} "{conflict["requires"]}".',
                file=sys.stderr,
            )


def _write_step_summary(report: dict[str, Any]) -> None:
    summary_path = os.getenv("GITHUB_STEP_SUMMARY")
    if not summary_path:
        return
    with open(summary_path, "a", encoding="utf-8") as fh:
        fh.write(render_summary(report))


def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.root is not None:
        report = check_repository(args.root, engine=settings.engine, mode=settings.mode)
    else:
        project = check_project(
            args.package,
            args.lockfile,
            engine=settings.engine,
            mode=settings.mode,
        )
        report = aggregate([project], mode=settings.mode.value, engine=settings.engine)

    if args.format == "json":
        print(json.dumps(report, indent=2))
    elif args.format == "markdown":
        print(render_summary(report), end="")
    else:
        _print_text(report, settings)
    _write_step_summary(report)

    if report["hasFindings"] and not settings.warn_only:
        return EXIT_FINDINGS
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config, root=args.root).merged(
            engine=args.engine,
            mode=args.mode,
            quiet=args.quiet,
            warn_only=args.warn_only,
            log_level=args.log_level,
        )
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    configure_logger(settings.log_level)
    try:
        return run(args, settings)
    except ManifestError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
