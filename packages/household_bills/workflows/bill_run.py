# ruff: noqa: I001
"""Workflow orchestrator for a statement → bill splits run.

Composes ingest, the persisted-history lookup, matching, and persistence
behind one importable function so the CLI and schedulers share a single
code path. DB imports stay local so DB-free runs never touch ``db``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from os import PathLike

from ..config import validate_occupant_count
from ..errors import ConfigurationError
from ..ingest.utils import LoadedStatement, load_statement
from ..matching import as_pattern_table, match_and_split_bills
from ..models import BillKey, BillMatch, DuplicateWarning, PatternTable


@dataclass(frozen=True, slots=True)
class BillRun:
    statement: LoadedStatement
    matches: list[BillMatch]
    duplicates: list[DuplicateWarning]
    transactions_saved: int = 0
    bills_saved: int = 0


def run_bills_from_csv(
    csv_path: str | PathLike[str],
    *,
    pattern_table: PatternTable | Mapping[str, str],
    occupant_count: int,
    database_url: str | None = None,
    persist: bool = False,
    source_account: str | None = None,
    on_progress: Callable[[str], None] | None = None,
) -> BillRun:
    """End-to-end: CSV → records → history check → bill splits → persist.

    Parameters
    ----------
    csv_path:
        Path to a Bank of America statement export.
    pattern_table / occupant_count:
        Matching configuration; validated before the file is read.
    database_url:
        Optional DB URL override. Whenever a database is reachable (this
        argument, ``DATABASE_URL`` in the environment, or ``persist``) the
        bills stored by earlier runs are consulted so a month is never billed
        twice.
    persist:
        Store the statement's transactions and the new bill splits.
    source_account:
        Optional account label stored with each transaction.
    on_progress:
        Optional callable receiving short status lines (e.g. ``print``).
    """

    n = validate_occupant_count(occupant_count)
    table = as_pattern_table(pattern_table)
    if len(table) == 0:
        raise ConfigurationError("pattern table is empty; no bills can be recognized")

    statement = load_statement(csv_path)
    if on_progress:
        on_progress(
            f"Parsed {len(statement.records)} transaction(s); "
            f"{len(statement.errors)} line(s) skipped as malformed."
        )

    use_history = persist or bool(database_url or os.getenv("DATABASE_URL"))
    history: set[BillKey] = set()
    if use_history:
        from db.client import session_scope
        from ..persistence import load_billed_keys

        with session_scope(database_url=database_url) as session:
            history = load_billed_keys(
                session, years={r.date.year for r in statement.records}
            )

    matches, duplicates = match_and_split_bills(
        statement.records, table, n, already_billed=history
    )
    if on_progress:
        on_progress(f"Matched {len(matches)} bill(s); {len(duplicates)} flagged as duplicate.")

    if not persist:
        return BillRun(statement, matches, duplicates)

    from db.client import session_scope
    from ..persistence import save_bill_matches, upsert_transactions

    with session_scope(database_url=database_url) as session:
        tx_saved = upsert_transactions(
            session, records=statement.records, source_account=source_account
        )
        bills_saved = save_bill_matches(session, matches=matches)
    if on_progress:
        on_progress(f"Stored {tx_saved} new transaction(s) and {bills_saved} bill split(s).")

    return BillRun(statement, matches, duplicates, tx_saved, bills_saved)


__all__ = ["BillRun", "run_bills_from_csv"]
