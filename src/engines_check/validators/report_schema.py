"""Validate an engines-check JSON report against the published schema.

Reads the report from a file, or from stdin when the input is ``-``::

    engines-check --root . --format json | engines-check-validate-report -
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

DEFAULT_SCHEMA = Path(__file__).resolve().parents[1] / "schemas" / "report.schema.json"
STDIN = "-"


def load_schema(schema_path: Path = DEFAULT_SCHEMA) -> dict[str, Any]:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return schema


def _describe(errors: Iterable[ValidationError]) -> str:
    return "\n".join(f"- {error.json_path}: {error.message}" for error in errors)


def validate_report(report: Any, schema_path: Path = DEFAULT_SCHEMA) -> None:
    """Raise ValueError listing every schema violation in ``report``."""
    validator = Draft202012Validator(load_schema(schema_path))
    errors = sorted(validator.iter_errors(report), key=lambda e: e.json_path)
    if errors:
        raise ValueError("\n" + _describe(errors))


def _read_report(source: str) -> Any:
    if source == STDIN:
        return json.load(sys.stdin)
    return json.loads(Path(source).read_text(encoding="utf-8"))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="engines-check-validate-report",
        description="Validate an engines-check JSON report.",
    )
    parser.add_argument("input", help="Report to validate, or '-' to read stdin")
    parser.add_argument(
        "--schema",
        type=Path,
        default=DEFAULT_SCHEMA,
        help="JSON schema to validate against (default: the bundled report schema)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        validate_report(_read_report(args.input), args.schema)
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"ERROR: Failed to read JSON: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"ERROR: Report failed validation:{exc}", file=sys.stderr)
        return 1

    name = "<stdin>" if args.input == STDIN else args.input
    print(f"Report {name} is valid")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
