# ruff: noqa: I001
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

from db.client import session_scope

from household_bills import load_statement, match_and_split_bills
from household_bills.config import load_pattern_table
from household_bills.models import BillKey
from household_bills.persistence import (
    compute_fingerprint,
    load_billed_keys,
    save_bill_matches,
    upsert_transactions,
)

from tests.helpers.db import bootstrap_sqlite_db, count_transactions, fetch_bill_splits


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "hb.sqlite3")


def test_fingerprint_uses_natural_key_only(sample_statement_path):
    rec = load_statement(sample_statement_path).records[0]
    same_line_other_export = replace(rec, running_balance=Decimal("0.00"), description=f" {rec.description} ")
    assert compute_fingerprint(rec) == compute_fingerprint(same_line_other_export)
    assert compute_fingerprint(rec) != compute_fingerprint(replace(rec, amount=rec.amount - 1))
    assert len(compute_fingerprint(rec)) == 64


def test_upsert_transactions_is_idempotent(db_url, sample_statement_path):
    records = load_statement(sample_statement_path).records

    with session_scope(database_url=db_url) as session:
        assert upsert_transactions(session, records=records, source_account="checking") == 7
    with session_scope(database_url=db_url) as session:
        assert upsert_transactions(session, records=records) == 0
        # Repeats inside one batch collapse as well.
        assert upsert_transactions(session, records=[records[0], records[0]]) == 0
        assert upsert_transactions(session, records=[]) == 0

    assert count_transactions(db_url) == 7


def test_bill_splits_round_trip_through_history(db_url, sample_statement_path):
    records = load_statement(sample_statement_path).records
    matches, _ = match_and_split_bills(records, load_pattern_table(), 3)

    with session_scope(database_url=db_url) as session:
        assert save_bill_matches(session, matches=matches) == 3
    with session_scope(database_url=db_url) as session:
        assert save_bill_matches(session, matches=matches) == 0
        keys = load_billed_keys(session)
        assert load_billed_keys(session, years=[2024]) == set()
        assert load_billed_keys(session, years=[]) == set()
        assert load_billed_keys(session, years={2025}) == keys

    assert keys == {
        BillKey("Pacific Gas and Electric Company", 1, 2025),
        BillKey("Great Oaks Water Company", 1, 2025),
        BillKey("Pacific Gas and Electric Company", 2, 2025),
    }

    rows = fetch_bill_splits(db_url)
    water = next(r for r in rows if r["merchant_name"] == "Great Oaks Water Company")
    assert water["total_amount"] == Decimal("322.29")
    assert water["split_amount"] == Decimal("107.43")
    assert water["occupant_count"] == 3
    assert water["tracking_id"] == "2025-January-Water"

    # Feeding the stored keys back in re-bills nothing.
    again = match_and_split_bills(records, load_pattern_table(), 3, already_billed=keys)
    assert again.matches == []
    assert len(again.duplicates) == 4
    assert all(d.kept is None for d in again.duplicates)
