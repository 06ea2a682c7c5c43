# ruff: noqa: I001
from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from household_bills.cli import app
from household_bills.logging_setup import reset_logging

from tests.helpers.db import bootstrap_sqlite_db

runner = CliRunner()


@pytest.fixture(autouse=True)
def _run_in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # The root callback loads ./.env; keep a developer's file out of the tests.
    monkeypatch.chdir(tmp_path)


def test_parse_statement_prints_records_and_warnings(sample_statement_path):
    result = runner.invoke(app, ["parse-statement", "--csv-path", str(sample_statement_path)])
    assert result.exit_code == 0, result.output
    assert (
        "2025-03-25\t-5324.73\t3105.45\tSanta Clara DTAC DES:SantaClara ID:XXXXX41875 "
        "INDN:Andrew Ting CO ID:XXXXX79161 WEB"
    ) in result.output
    assert "2025-01-03\t-100.50\t2967.87\tTest simple transaction" in result.output
    assert "Warning: skipped line 14: unterminated quoted field" in result.output
    assert "differ from the statement summary by -10.00" in result.output


def test_parse_statement_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["parse-statement", "--csv-path", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_split_bills_default_configuration(sample_statement_path):
    result = runner.invoke(app, ["split-bills", "--csv-path", str(sample_statement_path)])
    assert result.exit_code == 0, result.output
    assert (
        "2025-January-Electricity\tPacific Gas and Electric Company\t142.18\t47.39\t2025-01-02"
        in result.output
    )
    assert "2025-January-Water\tGreat Oaks Water Company\t322.29\t107.43\t2025-01-10" in result.output
    assert "2025-February-Electricity\tPacific Gas and Electric Company\t150.40\t50.13" in result.output
    assert "Duplicate: second Pacific Gas and Electric Company bill in 01/2025" in result.output


def test_split_bills_occupants_from_env(monkeypatch, sample_statement_path):
    monkeypatch.setenv("HB_OCCUPANT_COUNT", "2")
    result = runner.invoke(app, ["split-bills", "--csv-path", str(sample_statement_path)])
    assert result.exit_code == 0, result.output
    assert "\t142.18\t71.09\t" in result.output


def test_split_bills_custom_patterns(tmp_path: Path, sample_statement_path):
    patterns = tmp_path / "patterns.json"
    patterns.write_text(
        json.dumps([{"pattern": "santa clara dtac", "merchant_name": "Santa Clara DTAC", "bill_type": "tax"}]),
        encoding="utf-8",
    )
    result = runner.invoke(
        app,
        ["split-bills", "--csv-path", str(sample_statement_path), "--patterns", str(patterns), "--occupants", "4"],
    )
    assert result.exit_code == 0, result.output
    assert "2025-March-Tax\tSanta Clara DTAC\t5324.73\t1331.18\t2025-03-25" in result.output
    assert "Electricity" not in result.output


@pytest.mark.parametrize(
    "extra",
    [
        ["--occupants", "0"],
        ["--patterns", "does-not-exist.json"],
    ],
)
def test_split_bills_configuration_errors(sample_statement_path, extra):
    result = runner.invoke(app, ["split-bills", "--csv-path", str(sample_statement_path), *extra])
    assert result.exit_code == 2
    assert "Error: configuration:" in result.output


def test_split_bills_persist_without_database_fails_cleanly(sample_statement_path):
    result = runner.invoke(app, ["split-bills", "--csv-path", str(sample_statement_path), "--persist"])
    assert result.exit_code == 1
    assert "Error: bill run failed: DATABASE_URL is not set" in result.output


def test_split_bills_persist_twice(tmp_path: Path, sample_statement_path):
    url = bootstrap_sqlite_db(tmp_path / "hb.sqlite3")
    args = ["split-bills", "--csv-path", str(sample_statement_path), "--persist", "--database-url", url]

    first = runner.invoke(app, args)
    assert first.exit_code == 0, first.output
    assert "Stored 7 new transaction(s) and 3 bill split(s)." in first.output
    # Each invocation gets fresh streams; let the next one attach its own handler.
    reset_logging()

    second = runner.invoke(app, args)
    assert second.exit_code == 0, second.output
    assert "Matched 0 bill(s); 4 flagged as duplicate." in second.output
    assert "already billed in an earlier run" in second.output
    assert "2025-January-Water\t" not in second.output


def test_tracking_id_command():
    result = runner.invoke(app, ["tracking-id", "Venmo note: 2025-July-Electricity, thanks"])
    assert result.exit_code == 0, result.output
    assert "2025-July-Electricity\t2025\t07\telectricity" in result.output
    reset_logging()

    missing = runner.invoke(app, ["tracking-id", "rent for july"])
    assert missing.exit_code == 1
    assert "Error: no tracking id found" in missing.output


def test_bad_log_level():
    result = runner.invoke(app, ["--log-level", "CHATTY", "tracking-id", "2025-July-Water"])
    assert result.exit_code == 2
    assert "unknown log level" in result.output
