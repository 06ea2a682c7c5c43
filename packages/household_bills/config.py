"""Runtime configuration for ``household_bills``.

Values come from explicit arguments first, then the environment (a local
``.env`` is loaded by the CLI via ``python-dotenv``), then defaults:

- ``HB_OCCUPANT_COUNT``: people a bill is split across (default 3).
- ``HB_PATTERNS_FILE``: JSON merchant pattern table (default: the bundled
  ``ingest/seeds/bill_patterns.v1.json``).
- ``DATABASE_URL``: read by ``db.client`` when persistence is requested.

Every problem surfaces as :class:`~household_bills.errors.ConfigurationError`
before any statement is processed.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigurationError
from .models import PatternTable

DEFAULT_OCCUPANT_COUNT = 3
DEFAULT_PATTERNS_FILE = Path(__file__).resolve().parent / "ingest" / "seeds" / "bill_patterns.v1.json"

ENV_OCCUPANT_COUNT = "HB_OCCUPANT_COUNT"
ENV_PATTERNS_FILE = "HB_PATTERNS_FILE"


def validate_occupant_count(value: Any) -> int:
    # bool is an int subclass; True is not a head count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"occupant count must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"occupant count must be at least 1, got {value}")
    return value


def resolve_occupant_count(value: int | None = None) -> int:
    if value is not None:
        return validate_occupant_count(value)
    raw = os.getenv(ENV_OCCUPANT_COUNT)
    if raw is None or not raw.strip():
        return DEFAULT_OCCUPANT_COUNT
    try:
        parsed = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_OCCUPANT_COUNT} is not an integer: {raw!r}") from exc
    return validate_occupant_count(parsed)


def resolve_patterns_path(path: str | PathLike[str] | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_val = os.getenv(ENV_PATTERNS_FILE)
    if env_val and env_val.strip():
        return Path(env_val.strip())
    return DEFAULT_PATTERNS_FILE


def load_pattern_table(path: str | PathLike[str] | None = None) -> PatternTable:
    """Load and validate a JSON list of merchant patterns."""

    p = resolve_patterns_path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read pattern file {p}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"pattern file {p} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ConfigurationError(f"pattern file {p} must contain a JSON list")
    try:
        table = PatternTable(data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid pattern in {p}: {exc}") from exc
    if len(table) == 0:
        raise ConfigurationError(f"pattern file {p} defines no patterns")
    return table


@dataclass(frozen=True, slots=True)
class Settings:
    occupant_count: int
    pattern_table: PatternTable


def load_settings(
    *,
    occupant_count: int | None = None,
    patterns_file: str | PathLike[str] | None = None,
) -> Settings:
    return Settings(
        occupant_count=resolve_occupant_count(occupant_count),
        pattern_table=load_pattern_table(patterns_file),
    )


__all__ = [
    "DEFAULT_OCCUPANT_COUNT",
    "DEFAULT_PATTERNS_FILE",
    "Settings",
    "load_pattern_table",
    "load_settings",
    "resolve_occupant_count",
    "resolve_patterns_path",
    "validate_occupant_count",
]
