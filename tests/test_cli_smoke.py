"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from lead_ingest import __main__
from lead_ingest.cli import apply_overrides, main
from lead_ingest.detector import detect_field_mapping
from lead_ingest.models import CanonicalField


def _write_input(tmp_path):
    input_path = tmp_path / "input.csv"
    input_path.write_text(
        "Full Name,E-Mail,Cellphone,Random123\n"
        "Jane Doe,jane@example.com,5551234567,vip\n"
        "John Roe,not-an-email,5557654321,\n",
        encoding="utf-8",
    )
    return input_path


def test_detect_prints_json_mapping(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["detect", str(_write_input(tmp_path)), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["mapping"] == {
        "Full Name": "name",
        "E-Mail": "email",
        "Cellphone": "phone",
        "Random123": "notes",
    }


def test_import_writes_leads_and_job_summary(tmp_path) -> None:
    output_path = tmp_path / "leads.csv"
    jobs_path = tmp_path / "jobs.csv"

    exit_code = main(
        [
            "import",
            str(_write_input(tmp_path)),
            str(output_path),
            "--jobs-output",
            str(jobs_path),
            "--enrich",
        ]
    )

    assert exit_code == 0
    leads = pd.read_csv(output_path)
    assert list(leads["email"]) == ["jane@example.com", "not-an-email"]
    assert leads.loc[0, "notes"] == "vip"
    jobs = pd.read_csv(jobs_path)
    assert jobs.loc[0, "lifecycleState"] == "completed"
    assert jobs.loc[0, "validRecords"] == 1
    assert jobs.loc[0, "invalidRecords"] == 1


def test_import_with_config_and_override(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "validators": [
                    {
                        "name": "Rules",
                        "class": "lead_ingest.collaborators.sample.RuleBasedValidator",
                        "options": {"required_fields": ["name"]},
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    output_path = tmp_path / "leads.xlsx"

    exit_code = main(
        [
            "import",
            str(_write_input(tmp_path)),
            str(output_path),
            "--config",
            str(config_path),
            "--map",
            "Random123=budget",
        ]
    )

    assert exit_code == 0
    leads = pd.read_excel(output_path)
    assert leads.loc[0, "budget"] == "vip"


def test_apply_overrides_rejects_malformed_values() -> None:
    mapping = detect_field_mapping(["Full Name"])

    assert apply_overrides(mapping, ["Full Name=email"]).mapping["Full Name"] is CanonicalField.EMAIL
    with pytest.raises(ValueError):
        apply_overrides(mapping, ["Full Name"])


def test_bad_config_returns_usage_error(tmp_path) -> None:
    exit_code = main(["import", str(_write_input(tmp_path)), str(tmp_path / "out.csv"), "--config", str(tmp_path / "missing.json")])

    assert exit_code == 2


def test_module_entry_point_delegates_to_cli(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main(["detect", str(_write_input(tmp_path))])

    assert exit_code == 0
    assert "overall confidence: 1.00" in capsys.readouterr().out


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m lead_ingest" in captured.out
    assert exit_code == 2
