import io
import json
import re

import pytest

from engines_check.report import aggregate
from engines_check.summary import render_summary
from engines_check.validators import report_schema
from engines_check.validators.report_schema import validate_report

_UNESCAPED_PIPE = re.compile(r"(?<!\\)\|")

FINDING = {
    "package": "a",
    "installed": "1.0.0",
    "requires": ">=16",
    "message": 'a@1.0.0 requires node ">=16".',
}


def _project(path=".", **overrides):
    project = {
        "path": path,
        "lockfile": f"{path}/package-lock.json",
        "declared": ">=14.0.0",
        "findings": [],
        "skipped": [],
        "limits": None,
    }
    project.update(overrides)
    return project


class TestAggregate:
    def test_clean(self):
        report = aggregate([_project()], mode="validate", engine="node")
        assert report["version"] == "1"
        assert report["hasFindings"] is False
        assert report["totals"] == {"projects": 1, "findings": 0, "conflicts": 0, "errors": 0}
        validate_report(report)

    def test_counts(self):
        conflict = {
            "range": None,
            "simplified": None,
            "conflict": {"package": "b", "installed": "2.0.0", "requires": "<16"},
        }
        report = aggregate(
            [
                _project("a", findings=[FINDING, FINDING]),
                _project("b", declared=None, limits=conflict),
                _project("c", error="No engines.node is present in c/package.json."),
            ],
            mode="find-limits",
            engine="node",
        )
        assert report["hasFindings"] is True
        assert report["totals"] == {"projects": 3, "findings": 2, "conflicts": 1, "errors": 1}
        validate_report(report)

    def test_schema_rejects_unknown_keys(self):
        report = aggregate([_project(extra=True)], mode="validate", engine="node")
        with pytest.raises(ValueError, match="extra"):
            validate_report(report)


class TestSummary:
    def test_validate_table(self):
        report = aggregate(
            [_project("web", findings=[FINDING]), _project("api")], mode="validate", engine="node"
        )
        text = render_summary(report)
        assert text.startswith("# engines-check Summary (node)\n")
        assert "| Project | Declared | Package | Requires |" in text
        assert "| web | >=14.0.0 | a@1.0.0 | >=16 |" in text
        assert "| api | >=14.0.0 | All dependencies compatible | n/a |" in text

    def test_find_limits_table(self):
        ok = {"range": ">=18.0.0 <19.0.0-0", "simplified": "^18.0.0", "conflict": None}
        bad = {
            "range": None,
            "simplified": None,
            "conflict": {"package": "b", "installed": "2.0.0", "requires": "<16"},
        }
        report = aggregate(
            [_project("web", limits=ok), _project("api", limits=bad), _project("old", error="boom")],
            mode="find-limits",
            engine="node",
        )
        text = render_summary(report)
        assert "| Project | Compatible range | Conflict |" in text
        assert "| web | ^18.0.0 | n/a |" in text
        assert "| api | no compatible version | b@2.0.0 requires <16 |" in text
        assert "| old | error: boom | n/a |" in text
        assert "Conflicts: 1 | Errors: 1" in text

    def test_disjunctions_stay_inside_their_cells(self):
        finding = dict(FINDING, requires="^16 || ^18")
        validate = render_summary(
            aggregate(
                [_project(declared=">=14.0.0 <15.0.0-0 || >=18.0.0", findings=[finding])],
                mode="validate",
                engine="node",
            )
        )
        row = next(line for line in validate.splitlines() if line.startswith("| . |"))
        assert row == r"| . | >=14.0.0 <15.0.0-0 \|\| >=18.0.0 | a@1.0.0 | ^16 \|\| ^18 |"
        assert len(_UNESCAPED_PIPE.findall(row)) == 5

        limits = {"range": "", "simplified": "^16.0.0 || ^18.0.0", "conflict": None}
        text = render_summary(aggregate([_project(limits=limits)], mode="find-limits", engine="node"))
        row = next(line for line in text.splitlines() if line.startswith("| . |"))
        assert row == r"| . | ^16.0.0 \|\| ^18.0.0 | n/a |"
        assert len(_UNESCAPED_PIPE.findall(row)) == 4

    def test_no_projects(self):
        text = render_summary(aggregate([], mode="validate", engine="npm"))
        assert "| (no projects checked) | n/a | n/a | n/a |" in text


class TestValidateReportCli:
    def test_valid(self, tmp_path, capsys):
        path = tmp_path / "report.json"
        path.write_text(json.dumps(aggregate([_project()], mode="validate", engine="node")))
        assert report_schema.main([str(path)]) == 0
        assert "is valid" in capsys.readouterr().out

    def test_invalid(self, tmp_path, capsys):
        path = tmp_path / "report.json"
        path.write_text(json.dumps({"version": "1"}))
        assert report_schema.main([str(path)]) == 1
        assert "Report failed validation" in capsys.readouterr().err

    def test_missing_and_malformed(self, tmp_path, capsys):
        assert report_schema.main([str(tmp_path / "missing.json")]) == 1
        broken = tmp_path / "broken.json"
        broken.write_text("{")
        assert report_schema.main([str(broken)]) == 1
        assert "Failed to read JSON" in capsys.readouterr().err

    def test_reads_stdin(self, monkeypatch, capsys):
        report = aggregate([_project()], mode="validate", engine="node")
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(report)))
        assert report_schema.main(["-"]) == 0
        assert capsys.readouterr().out == "Report <stdin> is valid\n"
