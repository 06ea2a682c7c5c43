"""Public API for the ``household_bills`` package.

The two core operations are pure functions re-exported from their homes:

- :func:`parse_statement` (``ingest.adapters.bofa_statement_csv``): raw
  statement text → ``(records, errors)``.
- :func:`match_and_split_bills` (``matching``): records, pattern table and
  occupant count → ``(bill matches, duplicate warnings)``.

File-level and DB-backed helpers (:func:`load_statement`,
:func:`run_bills_from_csv`) are re-exported for callers that want the whole
flow. DB imports stay inside those helpers.
"""

from __future__ import annotations

from .ingest.adapters.bofa_statement_csv import (  # noqa: F401  (re-export)
    parse_statement,
    parse_statement_line,
    parse_statement_summary,
    reconcile,
)
from .ingest.utils import load_statement  # noqa: F401  (re-export)
from .matching import match_and_split_bills, split_amount  # noqa: F401  (re-export)
from .workflows.bill_run import run_bills_from_csv  # noqa: F401  (re-export)

__all__ = [
    "parse_statement",
    "parse_statement_line",
    "parse_statement_summary",
    "reconcile",
    "load_statement",
    "match_and_split_bills",
    "split_amount",
    "run_bills_from_csv",
]
