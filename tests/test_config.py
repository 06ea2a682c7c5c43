import json
from pathlib import Path

import pytest

from household_bills import ConfigurationError
from household_bills.config import (
    DEFAULT_OCCUPANT_COUNT,
    DEFAULT_PATTERNS_FILE,
    load_pattern_table,
    load_settings,
    resolve_occupant_count,
)


def _write_patterns(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_occupant_count_defaults_to_three():
    assert DEFAULT_OCCUPANT_COUNT == 3
    assert resolve_occupant_count() == 3


def test_occupant_count_from_env_and_explicit_override(monkeypatch):
    monkeypatch.setenv("HB_OCCUPANT_COUNT", " 4 ")
    assert resolve_occupant_count() == 4
    assert resolve_occupant_count(2) == 2


@pytest.mark.parametrize("raw", ["zero", "0", "-2", "1.5"])
def test_bad_occupant_count_env(monkeypatch, raw):
    monkeypatch.setenv("HB_OCCUPANT_COUNT", raw)
    with pytest.raises(ConfigurationError):
        resolve_occupant_count()


def test_bundled_pattern_table():
    assert DEFAULT_PATTERNS_FILE.is_file()
    table = load_pattern_table()
    assert len(table) == 4
    hit = table.match("PGANDE DES:WEB ONLINE ID:XXXXX92231 INDN:TING, ANDREW")
    assert hit is not None
    assert hit.merchant_name == "Pacific Gas and Electric Company"
    assert hit.bill_type == "electricity"
    water = table.match("GREAT OAKS WATER DES:WATER BILL")
    assert water is not None and water.bill_type == "water"
    # Lower priority values come first.
    assert [p.priority for p in table] == sorted(p.priority for p in table)


def test_patterns_file_from_env(monkeypatch, tmp_path):
    path = _write_patterns(
        tmp_path / "patterns.json",
        [{"pattern": "COMCAST", "merchant_name": "Comcast", "bill_type": "internet"}],
    )
    monkeypatch.setenv("HB_PATTERNS_FILE", str(path))
    settings = load_settings(occupant_count=2)
    assert settings.occupant_count == 2
    assert [p.merchant_name for p in settings.pattern_table] == ["Comcast"]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"pattern": "X", "merchant_name": "Y"}),
        json.dumps([]),
        json.dumps([{"pattern": "X"}]),
        json.dumps([{"pattern": "X", "merchant_name": "Y", "priority": "high"}]),
        json.dumps([{"pattern": "", "merchant_name": "Y"}]),
    ],
)
def test_invalid_pattern_files(tmp_path, content):
    path = tmp_path / "patterns.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_pattern_table(path)


def test_missing_pattern_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_pattern_table(tmp_path / "absent.json")


def test_load_settings_rejects_zero_occupants():
    with pytest.raises(ConfigurationError):
        load_settings(occupant_count=0)
