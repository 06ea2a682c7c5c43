"""Ingest utilities shared by CLI commands and workflows.

Exposes :func:`load_statement`, which reads one Bank of America statement
export from disk and runs the statement adapter over it. Reading the file is
all-or-nothing: an I/O or decoding failure propagates and aborts the batch,
while malformed lines are collected per line by the adapter.
"""

from __future__ import annotations

from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import NamedTuple

from ..errors import ParseError
from ..logging_setup import get_logger
from ..models import StatementSummary, TransactionRecord
from .adapters.bofa_statement_csv import parse_statement, parse_statement_summary, reconcile

logger = get_logger("household_bills.ingest")


class LoadedStatement(NamedTuple):
    path: Path
    records: list[TransactionRecord]
    errors: list[ParseError]
    summary: StatementSummary | None
    # Summary net change minus parsed total; ``None`` without a summary.
    unreconciled: Decimal | None


def load_statement(csv_path: str | PathLike[str]) -> LoadedStatement:
    """Read a statement CSV and return its records, line errors and summary."""

    p = Path(csv_path)
    with p.open(encoding="utf-8", newline="") as f:
        text = f.read()

    records, errors = parse_statement(text)
    summary = parse_statement_summary(text)
    gap = reconcile(summary, records)
    if gap:
        logger.warning(
            "%s: parsed amounts differ from the statement summary by %s", p.name, gap
        )
    logger.info("%s: %d transaction(s), %d bad line(s)", p.name, len(records), len(errors))
    return LoadedStatement(p, records, errors, summary, gap)


__all__ = ["LoadedStatement", "load_statement"]
