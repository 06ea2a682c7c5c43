# ruff: noqa: I001
"""Persistence integration for household_bills.

Functions here write parsed transactions and derived bill splits to the
shared database owned by ``libs/db``. They rely on SQLAlchemy ORM models in
``db.models.household`` and a session provided by ``db.client``; callers own
the transaction (``session_scope`` commits).

Scope:
- Insert statement transactions into ``hb_transactions``, de-duplicated on a
  natural-key fingerprint so overlapping exports import once.
- Insert bill splits into ``hb_bill_splits``. Stored splits are never
  updated; the ``(merchant_name, bill_month, bill_year)`` unique key makes a
  repeated insert a no-op.
- Read back billed keys for the cross-run duplicate check.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.household import HbBillSplit, HbTransaction
from .models import BillKey, BillMatch, TransactionRecord


def _to_decimal_2(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _insert_for(session: Session) -> Callable[[Any], Any]:
    """Return the dialect ``insert`` that supports ``on_conflict_do_nothing``."""

    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"unsupported database dialect for upserts: {dialect!r}")


def compute_fingerprint(record: TransactionRecord) -> str:
    """Compute a stable SHA-256 fingerprint over the record's natural key.

    Fields used: date (YYYY-MM-DD), amount (2dp string), description (trimmed).
    The running balance is excluded; it differs between overlapping exports.
    """

    payload = {
        "date": record.date.isoformat(),
        "amount": f"{_to_decimal_2(record.amount):.2f}",
        "description": record.description.strip(),
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def upsert_transactions(
    session: Session,
    *,
    records: Iterable[TransactionRecord],
    source_account: str | None = None,
) -> int:
    """Insert records not yet stored; return how many rows were new."""

    payloads: dict[str, dict[str, Any]] = {}
    for rec in records:
        fp = compute_fingerprint(rec)
        # First occurrence wins within one batch as well.
        payloads.setdefault(
            fp,
            {
                "source_account": source_account,
                "fingerprint_sha256": fp,
                "posted_date": rec.date,
                "description": rec.description,
                "amount": _to_decimal_2(rec.amount),
                "running_balance": _to_decimal_2(rec.running_balance),
            },
        )
    if not payloads:
        return 0

    insert = _insert_for(session)
    stmt = insert(HbTransaction).values(list(payloads.values()))
    stmt = stmt.on_conflict_do_nothing(index_elements=[HbTransaction.fingerprint_sha256])
    result = session.execute(stmt)
    return max(result.rowcount or 0, 0)


def save_bill_matches(session: Session, *, matches: Iterable[BillMatch]) -> int:
    """Insert bill splits whose merchant/month is not stored yet; return new rows."""

    payloads = [
        {
            "merchant_name": m.merchant_name,
            "bill_type": m.bill_type,
            "bill_month": m.bill_month,
            "bill_year": m.bill_year,
            "total_amount": _to_decimal_2(m.total_amount),
            "split_amount": m.split_amount,
            "occupant_count": m.occupant_count,
            "tracking_id": m.tracking_id,
            "transaction_fingerprint": compute_fingerprint(m.transaction),
            "transaction_date": m.transaction.date,
        }
        for m in matches
    ]
    if not payloads:
        return 0

    insert = _insert_for(session)
    stmt = insert(HbBillSplit).values(payloads)
    stmt = stmt.on_conflict_do_nothing(
        index_elements=[HbBillSplit.merchant_name, HbBillSplit.bill_month, HbBillSplit.bill_year]
    )
    result = session.execute(stmt)
    return max(result.rowcount or 0, 0)


def load_billed_keys(session: Session, *, years: Iterable[int] | None = None) -> set[BillKey]:
    """Return ``(merchant_name, bill_month, bill_year)`` of stored bill splits.

    ``years`` narrows the query to the years present in the current batch.
    """

    stmt = select(HbBillSplit.merchant_name, HbBillSplit.bill_month, HbBillSplit.bill_year)
    if years is not None:
        year_list = sorted(set(years))
        if not year_list:
            return set()
        stmt = stmt.where(HbBillSplit.bill_year.in_(year_list))
    return {BillKey(name, month, year) for name, month, year in session.execute(stmt).all()}


__all__ = [
    "compute_fingerprint",
    "upsert_transactions",
    "save_bill_matches",
    "load_billed_keys",
]
