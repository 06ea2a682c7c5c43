"""Pytest configuration for test isolation.

The database client keeps one process-wide engine bound to the first URL it
sees, and ``configure_logging`` keeps one handler on the package logger. Both
would leak between tests (a later test would hit the earlier test's SQLite
file, or log into a closed CliRunner stream), so an autouse fixture resets
them around every test. Environment variables the application reads are
cleared so a developer's ``.env`` or shell never changes test outcomes.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import reset_engine
from household_bills.logging_setup import reset_logging

DATA_DIR = Path(__file__).parent / "data"

_APP_ENV_VARS = (
    "DATABASE_URL",
    "HB_OCCUPANT_COUNT",
    "HB_PATTERNS_FILE",
    "HOUSEHOLD_BILLS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _APP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_engine()
    reset_logging()
    yield
    reset_engine()
    reset_logging()


@pytest.fixture
def sample_statement_path() -> Path:
    return DATA_DIR / "bofa_statement_sample.csv"
