"""Tests for the cashflow command line interface."""

import json
from pathlib import Path

import pytest

from cashflowlab import __version__
from cashflowlab.cli import EXAMPLE_SANDBOX, main

PLAN_PATH = Path(__file__).resolve().parents[1] / "data" / "documents" / "plan.yaml"


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_version(capsys):
    assert _run(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_example_prints_valid_json(capsys):
    assert _run(["example"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == EXAMPLE_SANDBOX["base"]


def test_example_sandbox(capsys):
    assert _run(["example", "--sandbox"]) == 0
    assert "tweaks" in json.loads(capsys.readouterr().out)


def test_project_summary(capsys):
    assert _run(["project", "-i", str(PLAN_PATH)]) == 0
    out = capsys.readouterr().out
    assert "Projection 2025-01-01 to 2025-03-31" in out
    assert "8,865.00" in out


def test_project_json_and_output(tmp_path, capsys):
    output = tmp_path / "result.json"

    assert _run(["project", "-i", str(PLAN_PATH), "--json", "-o", str(output)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["end_balance"] == 8865
    assert summary["days"] == 90
    saved = json.loads(output.read_text(encoding="utf-8"))
    assert len(saved["calendar"]) == 90


def test_project_missing_file(tmp_path, capsys):
    assert _run(["project", "-i", str(tmp_path / "missing.yaml")]) == 1
    assert "Error running projection" in capsys.readouterr().err


def test_project_strict_rejects_bad_document(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps({"incomeStreams": [{"id": "x", "amount": "lots", "frequency": "daily"}]}),
        encoding="utf-8",
    )

    assert _run(["project", "-i", str(path), "--strict"]) == 1
    assert "problem_ids: [x]" in capsys.readouterr().err


def test_whatif_json(tmp_path, capsys):
    path = tmp_path / "sandbox.json"
    path.write_text(json.dumps(EXAMPLE_SANDBOX), encoding="utf-8")

    assert _run(["whatif", "-i", str(path), "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert set(data) == {"baseline", "scenario", "comparison"}
    assert data["comparison"]["first_negative"]["status"] in {
        "none",
        "cleared",
        "new",
        "unchanged",
        "later",
        "sooner",
    }


def test_whatif_with_separate_base(tmp_path, capsys):
    path = tmp_path / "tweaks.json"
    path.write_text(json.dumps({"tweaks": {"global": {"pct": 0.1}}}), encoding="utf-8")

    assert _run(["whatif", "-i", str(path), "--base", str(PLAN_PATH)]) == 0
    assert "Difference (scenario - baseline)" in capsys.readouterr().out


def test_next_lists_upcoming(capsys):
    assert _run(["next", "-i", str(PLAN_PATH), "--days", "7", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [(row["date"], row["id"]) for row in data["occurrences"]] == [
        ("2025-01-01", "rent"),
        ("2025-01-03", "freelance"),
    ]


def test_next_applies_occurrence_overrides(tmp_path, capsys):
    path = tmp_path / "plan.json"
    path.write_text(
        json.dumps(
            {
                "settings": {"startDate": "2025-01-01", "endDate": "2025-03-31"},
                "incomeStreams": [
                    {"id": "salary", "name": "Salary", "amount": 1000, "frequency": "monthly",
                     "dayOfMonth": 1, "startDate": "2025-01-01", "endDate": "2025-12-31"}
                ],
                "transactionOverrides": [
                    {"parentId": "salary", "instanceDate": "2025-02-01", "deleted": True},
                    {"parentId": "salary", "instanceDate": "2025-03-01",
                     "modifications": {"amount": 1200}},
                ],
            }
        ),
        encoding="utf-8",
    )

    assert _run(["next", "-i", str(path), "--days", "90", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [(row["date"], row["amount"], row["modified"]) for row in data["occurrences"]] == [
        ("2025-01-01", 1000, False),
        ("2025-03-01", 1200, True),
    ]


def test_whatif_template(tmp_path, capsys):
    path = tmp_path / "sandbox.json"
    path.write_text(json.dumps({"tweaks": {}}), encoding="utf-8")

    argv = ["whatif", "-i", str(path), "--base", str(PLAN_PATH), "--json"]
    assert _run(argv + ["--template", "cost-cutting"]) == 0

    comparison = json.loads(capsys.readouterr().out)["comparison"]
    assert comparison["total_income"] == 0
    assert comparison["total_expenses"] < 0
    assert comparison["end_balance"] == pytest.approx(-comparison["total_expenses"])


def test_whatif_unknown_template(capsys):
    assert _run(["whatif", "-i", str(PLAN_PATH), "--template", "optimistic"]) == 2


def test_validate_clean_document(capsys):
    assert _run(["validate", "-i", str(PLAN_PATH)]) == 0
    assert "Validation passed" in capsys.readouterr().out


def test_validate_json_reports_errors(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps({"incomeStreams": [{"amount": 5, "frequency": "yearly"}]}),
        encoding="utf-8",
    )

    assert _run(["validate", "-i", str(path), "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["has_errors"] is True


def test_validate_warnings_exit_two(tmp_path, capsys):
    path = tmp_path / "warn.json"
    path.write_text(
        json.dumps(
            {
                "settings": {"startDate": "2025-01-01", "endDate": "2025-01-31"},
                "incomeStreams": [
                    {"id": "s", "amount": 5, "frequency": "monthly", "dayOfMonth": 45,
                     "startDate": "2025-01-01", "endDate": "2025-01-31"}
                ],
            }
        ),
        encoding="utf-8",
    )

    assert _run(["validate", "-i", str(path)]) == 2
    assert "Adjusted" in capsys.readouterr().out


def test_validate_unreadable_file(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    assert _run(["validate", "-i", str(path), "--format", "json"]) == 1
    assert json.loads(capsys.readouterr().out)["error"].startswith("Could not parse")


def test_command_is_required(capsys):
    assert _run([]) == 2
